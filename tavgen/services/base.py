"""Service protocols the orchestrator and wizard depend on."""

from __future__ import annotations

from typing import Optional, Protocol

from ..types import Emotion, ImageFile, ImageReference, JobStatus, Language, VoiceSettings


class VideoProvider(Protocol):
    """Talking-video backend driven by the generation pipeline."""

    def ensure_configured(self) -> None:
        """Raise ``ConfigurationError`` when no usable credential is set."""
        ...

    async def prepare_image(self, image: ImageFile) -> ImageReference:
        ...

    async def submit_job(
        self,
        image_ref: ImageReference,
        script: str,
        emotion: Emotion,
        voice_settings: Optional[VoiceSettings],
        language: Language,
    ) -> str:
        ...

    async def poll_job(self, job_id: str) -> JobStatus:
        ...


class ScriptEnhancer(Protocol):
    """Text service that polishes scripts and proposes voice settings."""

    async def enhance_script(self, script: str, emotion: Emotion) -> str:
        ...

    async def generate_voice_settings(self, emotion: Emotion, script: str) -> VoiceSettings:
        ...
