"""Command-line entry point for the TalkingAvatarGenerator wizard."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv

from tavgen.config import GeneratorConfig
from tavgen.pipeline import TalkingAvatarGenerator
from tavgen.progress import StepSnapshot
from tavgen.services.did import DIDClient
from tavgen.services.gemini import GeminiClient
from tavgen.types import AVAILABLE_VOICES, EMOTIONS, ImageFile, Language, StepStatus, get_emotion
from tavgen.utils.files import write_binary
from tavgen.utils.formatting import format_file_size, format_processing_time, unique_filename
from tavgen.validation import DEFAULT_BANNED_TERMS
from tavgen.wizard import AUTO_VOICE, Wizard


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(description="Turn a photo and a script into a talking avatar video.")
    parser.add_argument("image_path", help="Path to a JPEG, PNG or WebP portrait.")
    parser.add_argument("script", help="Text the avatar should speak (10-2000 characters).")
    parser.add_argument(
        "--emotion",
        default="happy",
        choices=[emotion.id for emotion in EMOTIONS],
        help="Emotion the avatar should convey.",
    )
    parser.add_argument(
        "--language",
        default=Language.ENGLISH.value,
        choices=[language.value for language in Language],
        help="Voice language; Tamil script text is detected automatically.",
    )
    parser.add_argument(
        "--voice",
        default=AUTO_VOICE,
        choices=[AUTO_VOICE] + [voice.id for voice in AVAILABLE_VOICES],
        help="Explicit provider voice id, or 'auto' to pick by emotion.",
    )
    parser.add_argument(
        "--enhance",
        action="store_true",
        help="Let Gemini rewrite the script for the chosen emotion first.",
    )
    parser.add_argument(
        "--enhanced-script",
        metavar="TEXT",
        help="Speak this pre-written version of the script instead of the original.",
    )
    parser.add_argument(
        "--save",
        metavar="DIR",
        help="Download the finished video into this directory.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def print_steps(steps: StepSnapshot) -> None:
    active = next((step for step in steps if step.status in (StepStatus.PROCESSING, StepStatus.ERROR)), None)
    if active is None:
        return
    message = f" - {active.message}" if active.message else ""
    print(f"[{active.status.value:>10}] {active.name} {active.progress:3d}%{message}")


async def download_video(url: str, target_dir: str, source_name: str, timeout: float) -> Path:
    """Fetch the rendered video next to a timestamped copy of the photo name."""
    filename = unique_filename(Path(source_name).with_suffix(".mp4").name, "_talking")
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
        response.raise_for_status()
    return write_binary(Path(target_dir) / filename, response.content)


async def run_wizard(args: argparse.Namespace, config: GeneratorConfig) -> int:
    if not config.did_configured:
        print("Error: set DID_API_KEY (in the environment or .env) to generate videos.")
        return 1
    async with DIDClient.from_config(config) as provider:
        generator = TalkingAvatarGenerator(config, provider)
        banned_terms = config.banned_terms or DEFAULT_BANNED_TERMS
        enhancer = GeminiClient.from_config(config)
        wizard = Wizard(
            generator,
            enhancer,
            banned_terms=banned_terms,
            on_progress=print_steps,
        )

        image = ImageFile.from_path(args.image_path)
        print(f"Photo: {image.name} ({format_file_size(image.size)})")
        if not wizard.upload_image(image):
            print(f"Error: {wizard.state.error}")
            return 1
        if not wizard.state.face_detected:
            print("Warning: the photo may not contain a clear face.")
        await wizard.next()

        wizard.select_emotion(get_emotion(args.emotion))
        await wizard.next()

        wizard.set_language(args.language)
        wizard.select_voice(args.voice)
        wizard.set_script(args.script)
        if args.enhanced_script:
            wizard.set_enhanced_script(args.enhanced_script)
        elif args.enhance:
            if not config.gemini_configured:
                print("Gemini is not configured; the script will be spoken as written.")
            enhanced = await wizard.enhance_script()
            print(f"Enhanced script: {enhanced}")
            emotion = wizard.state.emotion
            print(f"Description: {await enhancer.generate_video_description(enhanced, emotion)}")
        await wizard.next()

    if wizard.state.result is None:
        print(f"Generation failed: {wizard.state.error}")
        return 1

    result = wizard.state.result
    print("Generation completed.")
    print(f"Video: {result.video_url}")
    if result.audio_url:
        print(f"Audio: {result.audio_url}")
    if result.processing_time is not None:
        print(f"Processing time: {format_processing_time(result.processing_time)}")
    if args.save:
        saved = await download_video(result.video_url, args.save, args.image_path, config.request_timeout)
        print(f"Saved video to {saved}")
    print(f"Request and poll traces stored under {config.runs_dir}/")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point used by ``python run.py``."""
    args = parse_args(argv if argv is not None else sys.argv[1:])
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run_wizard(args, GeneratorConfig.from_env()))


if __name__ == "__main__":
    raise SystemExit(main())
