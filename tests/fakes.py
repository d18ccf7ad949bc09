"""Test doubles shared by the pipeline and wizard tests."""

from __future__ import annotations

from io import BytesIO
from typing import List, Optional, Sequence, Union

from PIL import Image

from tavgen.errors import ConfigurationError
from tavgen.types import (
    Emotion,
    ImageFile,
    ImageReference,
    JobState,
    JobStatus,
    Language,
    UploadedImage,
    VoiceSettings,
)

PollOutcome = Union[JobStatus, Exception]


def make_png(width: int = 400, height: int = 400, name: str = "face.png") -> ImageFile:
    """Encode a solid-colour PNG of the requested size."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), (200, 160, 120)).save(buffer, format="PNG")
    return ImageFile(name=name, data=buffer.getvalue(), content_type="image/png")


def done(url: str = "https://cdn.example.com/talk.mp4", audio: Optional[str] = None) -> JobStatus:
    return JobStatus(state=JobState.DONE, result_url=url, audio_url=audio)


def started() -> JobStatus:
    return JobStatus(state=JobState.STARTED)


class FakeProvider:
    """In-memory provider replaying a scripted sequence of poll outcomes."""

    def __init__(self, outcomes: Sequence[PollOutcome] = (), *, configured: bool = True) -> None:
        self.outcomes: List[PollOutcome] = list(outcomes) or [done()]
        self.configured = configured
        self.uploads: List[ImageFile] = []
        self.submissions: List[dict] = []
        self.polls = 0

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("D-ID API key is required for real video generation.")

    async def prepare_image(self, image: ImageFile) -> ImageReference:
        self.uploads.append(image)
        return UploadedImage("https://cdn.example.com/face.png")

    async def submit_job(
        self,
        image_ref: ImageReference,
        script: str,
        emotion: Emotion,
        voice_settings: Optional[VoiceSettings],
        language: Language,
    ) -> str:
        self.submissions.append(
            {
                "source_url": image_ref.source_url,
                "script": script,
                "emotion": emotion.id,
                "voice_settings": voice_settings,
                "language": language,
            }
        )
        return "tlk_123"

    async def poll_job(self, job_id: str) -> JobStatus:
        index = min(self.polls, len(self.outcomes) - 1)
        self.polls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeSleep:
    """Records requested delays without waiting."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeClock:
    """Monotonic clock advancing by ``step`` seconds per reading."""

    def __init__(self, step: float = 30.0) -> None:
        self._now = 0.0
        self._step = step

    def __call__(self) -> float:
        value = self._now
        self._now += self._step
        return value


class FakeEnhancer:
    """Script enhancer returning canned answers."""

    def __init__(self, voice_settings: Optional[VoiceSettings] = None) -> None:
        self.voice_settings = voice_settings or VoiceSettings(pitch=1.2, speed=1.1, emotion="happy")
        self.enhance_calls: List[str] = []

    async def enhance_script(self, script: str, emotion: Emotion) -> str:
        self.enhance_calls.append(script)
        return f"{script} [pause]"

    async def generate_voice_settings(self, emotion: Emotion, script: str) -> VoiceSettings:
        return self.voice_settings
