"""Static lookups mapping emotions and voice settings onto provider parameters."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Optional

from ..types import Gender, Language

FALLBACK_EMOTION = "calm"
DEFAULT_STYLE = "friendly"

_TAMIL_CHARS = re.compile("[\u0b80-\u0bff]")


def _row(male: str, female: str, neutral: str) -> Mapping[Gender, str]:
    return MappingProxyType({Gender.MALE: male, Gender.FEMALE: female, Gender.NEUTRAL: neutral})


_ENGLISH_VOICES = MappingProxyType(
    {
        "happy": _row("en-US-JasonNeural", "en-US-JennyNeural", "en-US-AriaNeural"),
        "sad": _row("en-US-GuyNeural", "en-US-SaraNeural", "en-US-DavisNeural"),
        "motivational": _row("en-US-TonyNeural", "en-US-NancyNeural", "en-US-JasonNeural"),
        "calm": _row("en-US-BrandonNeural", "en-US-MonicaNeural", "en-US-AriaNeural"),
        "angry": _row("en-US-ChristopherNeural", "en-US-MichelleNeural", "en-US-EricNeural"),
        "excited": _row("en-US-JasonNeural", "en-US-JennyNeural", "en-US-AriaNeural"),
        "professional": _row("en-US-BrianNeural", "en-US-EmmaNeural", "en-US-DavisNeural"),
        "romantic": _row("en-US-RyanNeural", "en-US-SaraNeural", "en-US-AriaNeural"),
    }
)

_VALLUVAR = "ta-IN-ValluvarNeural"
_PALLAVI = "ta-IN-PallaviNeural"

_TAMIL_VOICES = MappingProxyType(
    {
        "happy": _row(_VALLUVAR, _PALLAVI, _PALLAVI),
        "sad": _row(_VALLUVAR, _PALLAVI, _PALLAVI),
        "motivational": _row(_VALLUVAR, _PALLAVI, _VALLUVAR),
        "calm": _row(_VALLUVAR, _PALLAVI, _PALLAVI),
        "angry": _row(_VALLUVAR, _PALLAVI, _VALLUVAR),
        "excited": _row(_VALLUVAR, _PALLAVI, _PALLAVI),
        "professional": _row(_VALLUVAR, _PALLAVI, _VALLUVAR),
        "romantic": _row(_VALLUVAR, _PALLAVI, _PALLAVI),
    }
)

VOICE_TABLES: Mapping[Language, Mapping[str, Mapping[Gender, str]]] = MappingProxyType(
    {Language.ENGLISH: _ENGLISH_VOICES, Language.TAMIL: _TAMIL_VOICES}
)

VOICE_STYLES: Mapping[str, str] = MappingProxyType(
    {
        "happy": "cheerful",
        "sad": "sad",
        "motivational": "excited",
        "calm": "calm",
        "angry": "angry",
        "excited": "excited",
        "professional": "newscast",
        "romantic": "gentle",
    }
)


def detect_tamil(text: str) -> bool:
    """Return True when ``text`` contains characters from the Tamil block."""
    return _TAMIL_CHARS.search(text) is not None


def resolve_language(script: str, requested: Optional[Language | str] = None) -> Language:
    """Pick the voice table language; Tamil script text always wins."""
    if detect_tamil(script):
        return Language.TAMIL
    if requested is None:
        return Language.ENGLISH
    try:
        return Language(requested)
    except ValueError:
        return Language.ENGLISH


def select_voice_id(
    emotion_id: str,
    gender: Optional[Gender | str] = None,
    language: Language | str = Language.ENGLISH,
    explicit_voice: Optional[str] = None,
) -> str:
    """Return the provider voice id for an emotion, gender and language.

    ``explicit_voice`` overrides the lookup entirely.
    """
    if explicit_voice:
        return explicit_voice

    try:
        table = VOICE_TABLES[Language(language)]
    except ValueError:
        table = VOICE_TABLES[Language.ENGLISH]
    row = table.get(emotion_id) or table[FALLBACK_EMOTION]

    try:
        resolved_gender = Gender(gender) if gender else Gender.NEUTRAL
    except ValueError:
        resolved_gender = Gender.NEUTRAL
    return row[resolved_gender]


def voice_style(emotion_id: str) -> str:
    return VOICE_STYLES.get(emotion_id, DEFAULT_STYLE)


def voice_rate(speed: Optional[float]) -> str:
    # provider only accepts categorical prosody values
    if not speed:
        return "medium"
    if speed < 0.8:
        return "slow"
    if speed > 1.2:
        return "fast"
    return "medium"


def voice_pitch(pitch: Optional[float]) -> str:
    if not pitch:
        return "medium"
    if pitch < 0.9:
        return "low"
    if pitch > 1.1:
        return "high"
    return "medium"
