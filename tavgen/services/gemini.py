"""Gemini client used to polish scripts and suggest voice settings."""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from openai import AsyncOpenAI, OpenAIError

from ..config import DEFAULT_GEMINI_API_URL, DEFAULT_GEMINI_MODEL, GeneratorConfig, is_placeholder
from ..types import Emotion, Gender, VoiceSettings
from ..utils.prompts import load_prompt

logger = logging.getLogger(__name__)

DEFAULT_VOICE_SETTINGS: Mapping[str, VoiceSettings] = MappingProxyType(
    {
        "happy": VoiceSettings(pitch=1.2, speed=1.1, emotion="happy"),
        "sad": VoiceSettings(pitch=0.8, speed=0.9, emotion="sad"),
        "motivational": VoiceSettings(pitch=1.1, speed=1.0, emotion="motivational"),
        "calm": VoiceSettings(pitch=1.0, speed=0.95, emotion="calm"),
        "angry": VoiceSettings(pitch=1.3, speed=1.2, emotion="angry"),
        "excited": VoiceSettings(pitch=1.4, speed=1.3, emotion="excited"),
        "professional": VoiceSettings(pitch=1.0, speed=1.0, emotion="professional"),
        "romantic": VoiceSettings(pitch=0.9, speed=0.9, emotion="romantic"),
    }
)
NEUTRAL_VOICE_SETTINGS = VoiceSettings()


def default_voice_settings(emotion: Emotion) -> VoiceSettings:
    return DEFAULT_VOICE_SETTINGS.get(emotion.id, NEUTRAL_VOICE_SETTINGS)


def basic_enhancement(script: str, emotion: Emotion) -> str:
    """Rule-based emphasis markers used when the model is unreachable."""
    enhanced = script
    if emotion.id == "happy":
        enhanced = enhanced.replace(".", "! ").replace("?", "?! ")
    elif emotion.id in {"sad", "romantic"}:
        enhanced = enhanced.replace(".", "... ")
    elif emotion.id in {"motivational", "angry"}:
        enhanced = enhanced.upper().replace(".", "! ")
    elif emotion.id == "calm":
        enhanced = enhanced.replace(".", ". [pause] ")
    elif emotion.id == "excited":
        enhanced = enhanced.replace(".", "!! ").replace("?", "?! ")
    return enhanced.rstrip()


class GeminiClient:
    """Generates script enhancements via Gemini's OpenAI-compatible endpoint.

    Every public method degrades to a deterministic local answer when no key
    is configured or the API call fails, so the wizard never blocks on it.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url or DEFAULT_GEMINI_API_URL
        self._model = model
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "GeminiClient":
        return cls(
            api_key=config.gemini_api_key,
            api_url=config.gemini_api_url,
            model=config.gemini_model,
            timeout=config.request_timeout,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None or not is_placeholder(self._api_key)

    async def enhance_script(self, script: str, emotion: Emotion) -> str:
        if not self.configured:
            logger.info("Gemini API key not configured, returning original script")
            return script

        prompt = load_prompt("enhance_script", self._prompt_variables(script, emotion))
        try:
            text = await self._complete(prompt, temperature=0.7)
        except OpenAIError as exc:
            logger.warning("Gemini script enhancement failed, using basic enhancement: %s", exc)
            return basic_enhancement(script, emotion)
        return text or basic_enhancement(script, emotion)

    async def generate_voice_settings(self, emotion: Emotion, script: str) -> VoiceSettings:
        if not self.configured:
            return default_voice_settings(emotion)

        prompt = load_prompt("voice_settings", self._prompt_variables(script, emotion))
        try:
            text = await self._complete(prompt, temperature=0.2)
            settings = json.loads(self._clean_json_text(text or ""))
            if not isinstance(settings, dict):
                raise ValueError(f"expected a JSON object, got {settings!r}")
            return VoiceSettings.clamped(
                pitch=settings.get("pitch") or 1.0,
                speed=settings.get("speed") or 1.0,
                emotion=settings.get("emotion") or emotion.name.lower(),
                gender=settings.get("gender") or Gender.NEUTRAL,
            )
        except (OpenAIError, ValueError, TypeError) as exc:
            logger.warning("Gemini voice settings failed, using defaults for %s: %s", emotion.id, exc)
            return default_voice_settings(emotion)

    async def generate_video_description(self, script: str, emotion: Emotion) -> str:
        fallback = (
            f"A {emotion.name.lower()} talking video delivering your message "
            "with authentic emotional expression."
        )
        if not self.configured:
            return fallback

        prompt = load_prompt("video_description", self._prompt_variables(script, emotion))
        try:
            text = await self._complete(prompt, temperature=0.7)
        except OpenAIError as exc:
            logger.warning("Gemini video description failed: %s", exc)
            return fallback
        return text or fallback

    def _resolve_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, base_url=self._api_url, timeout=self._timeout)
        return self._client

    async def _complete(self, prompt: str, *, temperature: float) -> Optional[str]:
        client = self._resolve_client()
        response = await client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": prompt.strip()}],
            temperature=temperature,
        )
        text = self._extract_text(response)
        return text.strip() if text else None

    @staticmethod
    def _prompt_variables(script: str, emotion: Emotion) -> dict[str, Any]:
        return {
            "script": script,
            "emotion_name": emotion.name,
            "emotion_description": emotion.description,
            "emotion_label": emotion.name.lower(),
        }

    @staticmethod
    def _extract_text(response: Any) -> Optional[str]:
        """Extract assistant text content from OpenAI-compatible responses."""
        choices = getattr(response, "choices", None)
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return content if isinstance(content, str) else None

    @staticmethod
    def _clean_json_text(text: str) -> str:
        """Strip markdown fences and return the outermost JSON object."""
        stripped = text.strip()
        if stripped.startswith("```") and stripped.endswith("```"):
            lines = stripped.splitlines()
            if len(lines) >= 3:
                stripped = "\n".join(lines[1:-1]).strip()
        start = stripped.find("{")
        end = stripped.rfind("}")
        if start != -1 and end > start:
            return stripped[start : end + 1]
        return stripped
