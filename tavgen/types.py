"""Core data models used across the TalkingAvatarGenerator pipeline."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .utils.files import read_binary


class Language(str, Enum):
    ENGLISH = "english"
    TAMIL = "tamil"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"


class StepStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class ResultStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class JobState(str, Enum):
    """Lifecycle states reported by the provider for a talk job."""

    CREATED = "created"
    STARTED = "started"
    DONE = "done"
    ERROR = "error"
    REJECTED = "rejected"

    @property
    def terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ERROR, JobState.REJECTED)


@dataclass(frozen=True, slots=True)
class Emotion:
    """An emotion the avatar can express."""

    id: str
    name: str
    description: str
    color: str
    icon: str


@dataclass(frozen=True, slots=True)
class ImageFile:
    """An uploaded photo held in memory."""

    name: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> Optional[str]:
        """Declared content type, falling back to a guess from the file name."""
        if self.content_type:
            return self.content_type.lower()
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed

    @classmethod
    def from_path(cls, path: str | Path) -> "ImageFile":
        source = Path(path)
        content_type, _ = mimetypes.guess_type(source.name)
        return cls(name=source.name, data=read_binary(source), content_type=content_type)


@dataclass(frozen=True, slots=True)
class VoiceSettings:
    """Voice parameters applied to the provider's text-to-speech."""

    pitch: float = 1.0
    speed: float = 1.0
    emotion: str = "neutral"
    gender: Gender = Gender.NEUTRAL
    language: Optional[Language] = None
    voice_id: Optional[str] = None

    @classmethod
    def clamped(
        cls,
        *,
        pitch: float,
        speed: float,
        emotion: str,
        gender: Gender | str = Gender.NEUTRAL,
        language: Optional[Language] = None,
        voice_id: Optional[str] = None,
    ) -> "VoiceSettings":
        """Build settings with pitch and speed forced into ``[0.5, 2.0]``."""
        try:
            gender = Gender(gender)
        except ValueError:
            gender = Gender.NEUTRAL
        return cls(
            pitch=min(2.0, max(0.5, float(pitch))),
            speed=min(2.0, max(0.5, float(speed))),
            emotion=emotion,
            gender=gender,
            language=language,
            voice_id=voice_id,
        )


@dataclass(frozen=True, slots=True)
class VoiceOption:
    """A concrete provider voice the user may pick explicitly."""

    id: str
    name: str
    gender: Gender
    language: Language
    description: str
    accent: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Everything needed to produce one talking video."""

    image: ImageFile
    emotion: Emotion
    script: str
    enhanced_script: Optional[str] = None
    voice_settings: Optional[VoiceSettings] = None
    language: Language = Language.ENGLISH

    @property
    def final_script(self) -> str:
        if self.enhanced_script and self.enhanced_script.strip():
            return self.enhanced_script
        return self.script


@dataclass(frozen=True, slots=True)
class ProcessingStep:
    """One stage of the client-visible pipeline."""

    id: str
    name: str
    status: StepStatus = StepStatus.PENDING
    progress: int = 0
    message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Final output handed back to the caller."""

    video_url: str
    audio_url: str
    status: ResultStatus
    processing_time: Optional[timedelta] = None


@dataclass(frozen=True, slots=True)
class JobStatus:
    """Snapshot of a provider job as returned by one poll."""

    state: JobState
    result_url: Optional[str] = None
    audio_url: Optional[str] = None
    error_detail: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """Photo stored on the provider's asset endpoint."""

    url: str

    @property
    def source_url(self) -> str:
        return self.url


@dataclass(frozen=True, slots=True)
class InlinedImage:
    """Photo embedded as a data URL because the upload was refused."""

    data_url: str

    @property
    def source_url(self) -> str:
        return self.data_url


ImageReference = Union[UploadedImage, InlinedImage]


EMOTIONS: Tuple[Emotion, ...] = (
    Emotion("happy", "Happy", "Joyful and upbeat expression", "#FFD700", "😊"),
    Emotion("sad", "Sad", "Melancholy and thoughtful", "#6495ED", "😢"),
    Emotion("motivational", "Motivational", "Inspiring and energetic", "#FF6347", "💪"),
    Emotion("calm", "Calm", "Peaceful and serene", "#98FB98", "😌"),
    Emotion("angry", "Angry", "Intense and passionate", "#DC143C", "😠"),
    Emotion("excited", "Excited", "Enthusiastic and energetic", "#FF1493", "🤩"),
    Emotion("professional", "Professional", "Confident and authoritative", "#4169E1", "👔"),
    Emotion("romantic", "Romantic", "Warm and affectionate", "#FF69B4", "💕"),
)

_EMOTIONS_BY_ID: Dict[str, Emotion] = {emotion.id: emotion for emotion in EMOTIONS}


def get_emotion(emotion_id: str) -> Emotion:
    """Look up a catalogue emotion, raising ``KeyError`` for unknown ids."""
    return _EMOTIONS_BY_ID[emotion_id]


def _voice(
    voice_id: str,
    name: str,
    gender: Gender,
    language: Language,
    description: str,
    accent: Optional[str] = None,
) -> VoiceOption:
    return VoiceOption(voice_id, name, gender, language, description, accent)


_M, _F, _N = Gender.MALE, Gender.FEMALE, Gender.NEUTRAL
_EN, _TA = Language.ENGLISH, Language.TAMIL

AVAILABLE_VOICES: Tuple[VoiceOption, ...] = (
    _voice("en-US-JasonNeural", "Jason", _M, _EN, "Confident American male", "US"),
    _voice("en-US-TonyNeural", "Tony", _M, _EN, "Energetic American male", "US"),
    _voice("en-US-GuyNeural", "Guy", _M, _EN, "Warm American male", "US"),
    _voice("en-US-BrianNeural", "Brian", _M, _EN, "Professional American male", "US"),
    _voice("en-US-ChristopherNeural", "Christopher", _M, _EN, "Authoritative American male", "US"),
    _voice("en-US-EricNeural", "Eric", _M, _EN, "Calm American male", "US"),
    _voice("en-US-RyanNeural", "Ryan", _M, _EN, "Young American male", "US"),
    _voice("en-US-BrandonNeural", "Brandon", _M, _EN, "Friendly American male", "US"),
    _voice("en-GB-RyanNeural", "Ryan (British)", _M, _EN, "British male", "UK"),
    _voice("en-AU-WilliamNeural", "William", _M, _EN, "Australian male", "AU"),
    _voice("en-US-JennyNeural", "Jenny", _F, _EN, "Cheerful American female", "US"),
    _voice("en-US-AriaNeural", "Aria", _F, _EN, "Professional American female", "US"),
    _voice("en-US-SaraNeural", "Sara", _F, _EN, "Gentle American female", "US"),
    _voice("en-US-EmmaNeural", "Emma", _F, _EN, "Business American female", "US"),
    _voice("en-US-MichelleNeural", "Michelle", _F, _EN, "Confident American female", "US"),
    _voice("en-US-NancyNeural", "Nancy", _F, _EN, "Motivational American female", "US"),
    _voice("en-US-MonicaNeural", "Monica", _F, _EN, "Calm American female", "US"),
    _voice("en-US-DavisNeural", "Davis", _N, _EN, "Neutral American voice", "US"),
    _voice("en-GB-SoniaNeural", "Sonia (British)", _F, _EN, "British female", "UK"),
    _voice("en-AU-NatashaNeural", "Natasha", _F, _EN, "Australian female", "AU"),
    _voice("ta-IN-ValluvarNeural", "வள்ளுவர் (Valluvar)", _M, _TA, "Tamil male voice"),
    _voice("ta-IN-PallaviNeural", "பல்லவி (Pallavi)", _F, _TA, "Tamil female voice"),
    _voice("en-CA-LiamNeural", "Liam (Canadian)", _M, _EN, "Canadian male", "CA"),
    _voice("en-CA-ClaraNeural", "Clara (Canadian)", _F, _EN, "Canadian female", "CA"),
    _voice("en-IN-NeerjaNeural", "Neerja (Indian)", _F, _EN, "Indian English female", "IN"),
    _voice("en-IN-PrabhatNeural", "Prabhat (Indian)", _M, _EN, "Indian English male", "IN"),
)


@dataclass(slots=True)
class RunState:
    """Mutable state passed between pipeline nodes during one run."""

    request: GenerationRequest
    started_at: float
    image_ref: Optional[ImageReference] = None
    script: Optional[str] = None
    job_id: Optional[str] = None
    job: Optional[JobStatus] = None
    result: Optional[GenerationResult] = None
