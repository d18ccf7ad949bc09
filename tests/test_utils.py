"""Tests for configuration, formatting and prompt helpers."""

from __future__ import annotations

import os
import unittest
from datetime import datetime, timedelta
from unittest import mock

from tavgen.config import DEFAULT_DID_API_URL, GeneratorConfig
from tavgen.utils.formatting import format_file_size, format_processing_time, unique_filename
from tavgen.utils.prompts import load_prompt, template_fields


class ConfigTest(unittest.TestCase):
    def test_from_env_reads_keys_and_overrides(self) -> None:
        env = {
            "DID_API_KEY": "user:secret",
            "GEMINI_API_KEY": "your-gemini-api-key-here",
            "TAVGEN_POLL_INTERVAL": "1.5",
            "TAVGEN_MAX_POLL_ATTEMPTS": "12",
            "TAVGEN_BANNED_TERMS": "Rubbish, nonsense ,,",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = GeneratorConfig.from_env()

        self.assertTrue(config.did_configured)
        self.assertFalse(config.gemini_configured)
        self.assertEqual(config.did_api_url, DEFAULT_DID_API_URL)
        self.assertEqual(config.poll_interval, 1.5)
        self.assertEqual(config.max_poll_attempts, 12)
        self.assertEqual(config.banned_terms, frozenset({"rubbish", "nonsense"}))

    def test_defaults_without_environment(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            config = GeneratorConfig.from_env()

        self.assertFalse(config.did_configured)
        self.assertEqual(config.max_poll_attempts, 60)
        self.assertEqual(config.poll_interval, 5.0)
        self.assertEqual(config.banned_terms, frozenset())


class FormattingTest(unittest.TestCase):
    def test_file_size(self) -> None:
        self.assertEqual(format_file_size(0), "0 Bytes")
        self.assertEqual(format_file_size(512), "512 Bytes")
        self.assertEqual(format_file_size(1024), "1 KB")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(10 * 1024 * 1024), "10 MB")

    def test_processing_time(self) -> None:
        self.assertEqual(format_processing_time(timedelta(seconds=42)), "42s")
        self.assertEqual(format_processing_time(timedelta(seconds=75)), "1m 15s")

    def test_unique_filename_keeps_extension(self) -> None:
        name = unique_filename("face.png", "_talking", datetime(2024, 1, 2, 3, 4, 5))
        self.assertEqual(name, "face_talking_2024-01-02T03-04-05.png")


class PromptTest(unittest.TestCase):
    def test_prompt_renders_all_fields(self) -> None:
        variables = {
            "script": "Hello there.",
            "emotion_name": "Calm",
            "emotion_description": "Peaceful and serene",
            "emotion_label": "calm",
        }
        for name in ("enhance_script", "voice_settings", "video_description"):
            with self.subTest(prompt=name):
                rendered = load_prompt(name, variables)
                self.assertIn("Hello there.", rendered)
                self.assertNotIn("{{", rendered)

    def test_missing_field_raises(self) -> None:
        self.assertIn("script", template_fields("enhance_script"))
        with self.assertRaises(KeyError):
            load_prompt("enhance_script", {"script": "Hello there."})

    def test_unknown_template(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_prompt("does_not_exist")


if __name__ == "__main__":
    unittest.main()
