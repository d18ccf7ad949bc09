#!/usr/bin/env python3
"""Run live connectivity checks against the D-ID and Gemini services."""

from __future__ import annotations

import argparse
import asyncio
import sys
import textwrap
from typing import Iterable, List, Optional, Tuple

from dotenv import load_dotenv

from tavgen.config import GeneratorConfig, is_placeholder
from tavgen.services.did import DIDClient
from tavgen.services.gemini import GeminiClient
from tavgen.types import get_emotion

CheckResult = Tuple[str, bool, str]


async def run_did_check(api_key: str, api_url: str) -> str:
    async with DIDClient(api_key=api_key, api_url=api_url) as client:
        if not await client.validate_api_key():
            raise RuntimeError("D-ID rejected the API key (401)")
        usage = await client.get_usage_info()
    if usage is None:
        return "Key accepted; credit information unavailable."
    remaining = usage.get("remaining", "?")
    total = usage.get("total", "?")
    return f"Key accepted; {remaining} of {total} credits remaining."


async def run_gemini_check(api_key: str, api_url: Optional[str], model: str, script: str, emotion_id: str) -> str:
    emotion = get_emotion(emotion_id)
    client = GeminiClient(api_key=api_key, api_url=api_url, model=model)
    enhanced = await client.enhance_script(script, emotion)
    settings = await client.generate_voice_settings(emotion, enhanced)
    return (
        f"Enhanced script: {enhanced!r}; voice pitch={settings.pitch} "
        f"speed={settings.speed} gender={settings.gender.value}"
    )


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Smoke-test connectivity for the D-ID and Gemini services.
            Keys default to DID_API_KEY / GEMINI_API_KEY from the environment or .env;
            a check is skipped when no usable key is available.
            """
        ),
    )
    parser.add_argument("--did-key", help="D-ID API key, overrides DID_API_KEY.")
    parser.add_argument("--did-url", help="D-ID API base URL, overrides DID_API_URL.")
    parser.add_argument("--gemini-key", help="Gemini API key, overrides GEMINI_API_KEY.")
    parser.add_argument("--gemini-url", help="Gemini OpenAI-compatible base URL.")
    parser.add_argument("--gemini-model", help="Gemini model name.")
    parser.add_argument(
        "--script",
        default="Hello everyone. Today I want to share something wonderful with you.",
        help="Script sent to the Gemini enhancement check.",
    )
    parser.add_argument("--emotion", default="happy", help="Emotion id used for the Gemini check.")
    return parser.parse_args(list(argv))


async def run_checks(args: argparse.Namespace, config: GeneratorConfig) -> List[CheckResult]:
    results: List[CheckResult] = []

    did_key = args.did_key or config.did_api_key
    if not is_placeholder(did_key):
        try:
            detail = await run_did_check(did_key, args.did_url or config.did_api_url)
            results.append(("D-ID", True, detail))
        except Exception as exc:  # noqa: BLE001 - surface connectivity failures
            results.append(("D-ID", False, repr(exc)))
    else:
        results.append(("D-ID", False, "Skipped (no D-ID key provided)"))

    gemini_key = args.gemini_key or config.gemini_api_key
    if not is_placeholder(gemini_key):
        try:
            detail = await run_gemini_check(
                gemini_key,
                args.gemini_url or config.gemini_api_url,
                args.gemini_model or config.gemini_model,
                args.script,
                args.emotion,
            )
            results.append(("Gemini", True, detail))
        except Exception as exc:  # noqa: BLE001
            results.append(("Gemini", False, repr(exc)))
    else:
        results.append(("Gemini", False, "Skipped (no Gemini key provided)"))

    return results


def main(argv: Iterable[str]) -> int:
    args = parse_args(argv)
    load_dotenv()
    results = asyncio.run(run_checks(args, GeneratorConfig.from_env()))

    any_failure = False
    for name, ok, detail in results:
        status = "SUCCESS" if ok else "FAIL"
        print(f"[{name}] {status}: {detail}")
        if not ok and "Skipped" not in detail:
            any_failure = True

    return 0 if not any_failure else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
