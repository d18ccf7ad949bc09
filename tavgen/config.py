"""Configuration containers for the TalkingAvatarGenerator pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import ClassVar

DEFAULT_DID_API_URL = "https://api.d-id.com"
DEFAULT_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"

# Values shipped in example .env files; treated the same as an absent key.
PLACEHOLDER_KEYS = frozenset(
    {
        "your_did_api_key_here",
        "your-did-api-key-here",
        "your_gemini_api_key_here",
        "your-gemini-api-key-here",
    }
)


def is_placeholder(value: str | None) -> bool:
    """Return True when ``value`` is empty or one of the known placeholders."""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped.lower() in PLACEHOLDER_KEYS


def _split_terms(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    return frozenset(term.strip().lower() for term in raw.split(",") if term.strip())


@dataclass(slots=True)
class GeneratorConfig:
    """Static configuration applied to every generation run."""

    env_prefix: ClassVar[str] = "TAVGEN_"

    runs_dir: str = "runs"
    did_api_key: str | None = None
    did_api_url: str = DEFAULT_DID_API_URL
    gemini_api_key: str | None = None
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    gemini_model: str = DEFAULT_GEMINI_MODEL
    poll_interval: float = 5.0
    max_poll_attempts: int = 60
    request_timeout: float = 60.0
    banned_terms: frozenset[str] = field(default_factory=frozenset)

    @property
    def did_configured(self) -> bool:
        return not is_placeholder(self.did_api_key)

    @property
    def gemini_configured(self) -> bool:
        return not is_placeholder(self.gemini_api_key)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Create a config object populated from environment variables."""
        prefix = cls.env_prefix
        return cls(
            runs_dir=os.getenv(f"{prefix}RUNS_DIR", "runs"),
            did_api_key=os.getenv("DID_API_KEY"),
            did_api_url=os.getenv("DID_API_URL") or DEFAULT_DID_API_URL,
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_api_url=os.getenv("GEMINI_API_URL") or DEFAULT_GEMINI_API_URL,
            gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            poll_interval=float(os.getenv(f"{prefix}POLL_INTERVAL", "5")),
            max_poll_attempts=int(os.getenv(f"{prefix}MAX_POLL_ATTEMPTS", "60")),
            request_timeout=float(os.getenv(f"{prefix}REQUEST_TIMEOUT", "60")),
            banned_terms=_split_terms(os.getenv(f"{prefix}BANNED_TERMS")),
        )
