"""Script checks applied before a generation request is built."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import ValidationError

MIN_SCRIPT_LENGTH = 10
MAX_SCRIPT_LENGTH = 2000

DEFAULT_BANNED_TERMS = frozenset({"fuck", "shit", "bitch", "bastard", "asshole"})


@dataclass(frozen=True, slots=True)
class ScriptValidation:
    valid: bool
    error: Optional[str] = None


def _contains_term(text: str, term: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term)}(?!\w)", text, flags=re.IGNORECASE) is not None


def validate_script(script: str, banned_terms: Iterable[str] = DEFAULT_BANNED_TERMS) -> ScriptValidation:
    """Check length bounds and the banned-word list.

    Length is measured on the raw text, so ``MAX_SCRIPT_LENGTH`` characters
    is still accepted. Banned terms only match whole words.
    """
    if not script.strip():
        return ScriptValidation(False, "Please enter a script for your video")
    if len(script) < MIN_SCRIPT_LENGTH:
        return ScriptValidation(False, f"Script must be at least {MIN_SCRIPT_LENGTH} characters long")
    if len(script) > MAX_SCRIPT_LENGTH:
        return ScriptValidation(False, f"Script must be less than {MAX_SCRIPT_LENGTH} characters")
    if any(_contains_term(script, term) for term in banned_terms if term):
        return ScriptValidation(False, "Please use appropriate language in your script")
    return ScriptValidation(True)


def ensure_valid_script(script: str, banned_terms: Iterable[str] = DEFAULT_BANNED_TERMS) -> str:
    """Return ``script`` unchanged or raise ``ValidationError``."""
    result = validate_script(script, banned_terms)
    if not result.valid:
        raise ValidationError(result.error or "Invalid script")
    return script
