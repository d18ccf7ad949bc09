"""Wizard state routing user selections into the generation pipeline."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Tuple

from .errors import GenerationError, InvalidImageError
from .media import has_face, resize_image, validate_image
from .pipeline import TalkingAvatarGenerator
from .progress import ProgressCallback, StepSnapshot
from .services.base import ScriptEnhancer
from .types import (
    AVAILABLE_VOICES,
    Emotion,
    GenerationRequest,
    GenerationResult,
    ImageFile,
    Language,
    ProcessingStep,
)
from .validation import DEFAULT_BANNED_TERMS, validate_script

logger = logging.getLogger(__name__)

STEPS: Tuple[str, ...] = ("Upload Photo", "Choose Emotion", "Write Script", "Generate Video")
UPLOAD_STEP, EMOTION_STEP, SCRIPT_STEP, RESULT_STEP = range(len(STEPS))

AUTO_VOICE = "auto"
_VOICE_IDS = frozenset(voice.id for voice in AVAILABLE_VOICES)


@dataclass(slots=True)
class WizardState:
    """Everything the UI needs to render the current wizard screen."""

    current_step: int = UPLOAD_STEP
    image: Optional[ImageFile] = None
    face_detected: Optional[bool] = None
    emotion: Optional[Emotion] = None
    language: Language = Language.ENGLISH
    script: str = ""
    enhanced_script: str = ""
    voice: str = AUTO_VOICE
    is_processing: bool = False
    processing_steps: Tuple[ProcessingStep, ...] = field(default_factory=tuple)
    result: Optional[GenerationResult] = None
    error: Optional[str] = None


class Wizard:
    """Drives the four-screen flow: photo, emotion, script, then generation."""

    def __init__(
        self,
        generator: TalkingAvatarGenerator,
        enhancer: ScriptEnhancer,
        banned_terms: Iterable[str] = DEFAULT_BANNED_TERMS,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._generator = generator
        self._enhancer = enhancer
        self._on_progress = on_progress
        self._banned_terms = frozenset(banned_terms)
        self.state = WizardState()
        self._cancel: Optional[asyncio.Event] = None

    def upload_image(self, image: Optional[ImageFile]) -> bool:
        """Validate and shrink the photo; ``None`` clears the selection."""
        if image is None:
            self.state.image = None
            self.state.face_detected = None
            self.state.error = None
            return True
        try:
            validate_image(image)
        except InvalidImageError as exc:
            self.state.error = str(exc)
            return False

        prepared = resize_image(image)
        self.state.image = prepared
        self.state.face_detected = has_face(prepared)
        self.state.error = None
        if not self.state.face_detected:
            logger.info("Photo %s may not contain a clear face", image.name)
        return True

    def select_emotion(self, emotion: Emotion) -> None:
        self.state.emotion = emotion
        self.state.error = None

    def set_language(self, language: Language | str) -> None:
        self.state.language = Language(language)

    def select_voice(self, voice_id: str) -> None:
        if voice_id != AUTO_VOICE and voice_id not in _VOICE_IDS:
            raise ValueError(f"Unknown voice {voice_id!r}")
        self.state.voice = voice_id

    def set_script(self, script: str) -> None:
        self.state.script = script
        self.state.error = None

    def set_enhanced_script(self, enhanced_script: str) -> None:
        self.state.enhanced_script = enhanced_script

    async def enhance_script(self) -> str:
        if self.state.emotion is None:
            self.state.error = "Please select an emotion"
            return self.state.enhanced_script
        enhanced = await self._enhancer.enhance_script(self.state.script, self.state.emotion)
        self.state.enhanced_script = enhanced
        return enhanced

    def can_go_next(self) -> bool:
        step = self.state.current_step
        if step == UPLOAD_STEP:
            return self.state.image is not None
        if step == EMOTION_STEP:
            return self.state.emotion is not None
        if step == SCRIPT_STEP:
            return validate_script(self.state.script, self._banned_terms).valid
        return False

    async def next(self) -> None:
        step = self.state.current_step
        if step == UPLOAD_STEP and self.state.image is None:
            self.state.error = "Please upload a photo first"
            return
        if step == EMOTION_STEP and self.state.emotion is None:
            self.state.error = "Please select an emotion"
            return
        if step == SCRIPT_STEP:
            await self.generate()
            return
        self.state.current_step = min(step + 1, RESULT_STEP)
        self.state.error = None

    def back(self) -> None:
        self.state.current_step = max(self.state.current_step - 1, UPLOAD_STEP)
        self.state.error = None

    def cancel(self) -> None:
        """Ask an in-flight generation to stop at its next wait point."""
        if self._cancel is not None:
            self._cancel.set()

    async def generate(self) -> Optional[GenerationResult]:
        """Build the request and run the pipeline, recording any failure in ``state.error``."""
        state = self.state
        if state.is_processing:
            state.error = "A video is already being generated"
            return None
        if state.image is None or state.emotion is None or not state.script.strip():
            state.error = "Please complete all steps before generating the video"
            return None

        validation = validate_script(state.script, self._banned_terms)
        if not validation.valid:
            state.error = validation.error or "Invalid script"
            return None

        state.is_processing = True
        state.error = None
        state.processing_steps = ()
        self._cancel = asyncio.Event()
        try:
            voice_settings = await self._enhancer.generate_voice_settings(
                state.emotion, state.enhanced_script or state.script
            )
            if state.voice != AUTO_VOICE:
                voice_settings = replace(voice_settings, voice_id=state.voice)

            request = GenerationRequest(
                image=state.image,
                emotion=state.emotion,
                script=state.script,
                enhanced_script=state.enhanced_script or None,
                voice_settings=voice_settings,
                language=state.language,
            )
            result = await self._generator.run(request, self._on_steps, cancel=self._cancel)
        except GenerationError as exc:
            logger.error("Video generation failed: %s", exc)
            state.error = str(exc) or "Failed to generate video"
            return None
        finally:
            state.is_processing = False
            self._cancel = None

        state.result = result
        state.current_step = RESULT_STEP
        return result

    def regenerate(self) -> None:
        """Drop the current result and return to the script screen."""
        self.state.result = None
        self.state.current_step = SCRIPT_STEP

    async def _on_steps(self, steps: StepSnapshot) -> None:
        self.state.processing_steps = steps
        if self._on_progress is not None:
            outcome = self._on_progress(steps)
            if inspect.isawaitable(outcome):
                await outcome
