"""Tests for voice table lookups."""

from __future__ import annotations

import unittest

from tavgen.services.voices import (
    detect_tamil,
    resolve_language,
    select_voice_id,
    voice_pitch,
    voice_rate,
    voice_style,
)
from tavgen.types import AVAILABLE_VOICES, Gender, Language


class VoiceSelectionTest(unittest.TestCase):
    def test_emotion_gender_language_lookup(self) -> None:
        self.assertEqual(select_voice_id("happy", Gender.MALE, Language.ENGLISH), "en-US-JasonNeural")
        self.assertEqual(select_voice_id("professional", Gender.FEMALE, Language.ENGLISH), "en-US-EmmaNeural")
        self.assertEqual(select_voice_id("sad", Gender.MALE, Language.TAMIL), "ta-IN-ValluvarNeural")

    def test_explicit_voice_wins(self) -> None:
        self.assertEqual(
            select_voice_id("happy", Gender.MALE, Language.ENGLISH, explicit_voice="en-AU-NatashaNeural"),
            "en-AU-NatashaNeural",
        )

    def test_unknown_inputs_fall_back(self) -> None:
        self.assertEqual(select_voice_id("bored", Gender.FEMALE), select_voice_id("calm", Gender.FEMALE))
        self.assertEqual(select_voice_id("happy", "robot"), select_voice_id("happy", Gender.NEUTRAL))
        self.assertEqual(select_voice_id("happy", None), "en-US-AriaNeural")

    def test_table_voices_are_in_catalogue(self) -> None:
        known = {voice.id for voice in AVAILABLE_VOICES}
        for language in Language:
            for emotion_id in ("happy", "sad", "motivational", "calm", "angry", "excited", "professional", "romantic"):
                for gender in Gender:
                    with self.subTest(language=language, emotion=emotion_id, gender=gender):
                        self.assertIn(select_voice_id(emotion_id, gender, language), known)


class LanguageDetectionTest(unittest.TestCase):
    def test_tamil_characters_detected(self) -> None:
        self.assertTrue(detect_tamil("Hello வணக்கம்"))
        self.assertFalse(detect_tamil("Hello there"))

    def test_tamil_script_overrides_requested_language(self) -> None:
        self.assertEqual(resolve_language("வணக்கம்", Language.ENGLISH), Language.TAMIL)
        self.assertEqual(resolve_language("Hello", Language.TAMIL), Language.TAMIL)
        self.assertEqual(resolve_language("Hello", None), Language.ENGLISH)
        self.assertEqual(resolve_language("Hello", "klingon"), Language.ENGLISH)


class ProsodyTest(unittest.TestCase):
    def test_rate_buckets(self) -> None:
        self.assertEqual(voice_rate(0.7), "slow")
        self.assertEqual(voice_rate(0.8), "medium")
        self.assertEqual(voice_rate(1.2), "medium")
        self.assertEqual(voice_rate(1.3), "fast")
        self.assertEqual(voice_rate(None), "medium")

    def test_pitch_buckets(self) -> None:
        self.assertEqual(voice_pitch(0.8), "low")
        self.assertEqual(voice_pitch(1.0), "medium")
        self.assertEqual(voice_pitch(1.2), "high")

    def test_style_defaults_to_friendly(self) -> None:
        self.assertEqual(voice_style("professional"), "newscast")
        self.assertEqual(voice_style("bored"), "friendly")


if __name__ == "__main__":
    unittest.main()
