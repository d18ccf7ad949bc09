"""Exception hierarchy surfaced by the generation workflow."""

from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """Base class for every failure raised by the package."""


class ConfigurationError(GenerationError):
    """A required credential is missing or still set to its placeholder."""


class ValidationError(GenerationError):
    """User supplied input (script or image) was rejected."""


class InvalidImageError(ValidationError):
    """The uploaded photo has an unsupported type or size."""


class ProviderError(GenerationError):
    """The video provider answered with a failure or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class GenerationTimeoutError(GenerationError, TimeoutError):
    """Polling budget was exhausted before the job reached a terminal state."""


class GenerationCancelled(GenerationError):
    """The caller asked for the run to stop."""
