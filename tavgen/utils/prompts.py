"""Prompt templates sent to the script enhancer."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Mapping

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"
_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@lru_cache(maxsize=None)
def _read_template(name: str) -> str:
    path = PROMPTS_DIR / f"{name}.txt"
    if not path.is_file():
        raise FileNotFoundError(f"No prompt template named {name!r} in {PROMPTS_DIR}")
    return path.read_text(encoding="utf-8")


def template_fields(name: str) -> FrozenSet[str]:
    """Names of the ``{{ placeholder }}`` fields used by template ``name``."""
    return frozenset(_PLACEHOLDER_PATTERN.findall(_read_template(name)))


def load_prompt(name: str, variables: Mapping[str, object] | None = None) -> str:
    """Render template ``name``; every placeholder must be supplied.

    ``None`` values render as an empty string.
    """
    template = _read_template(name)
    values = variables or {}
    missing = template_fields(name) - set(values)
    if missing:
        raise KeyError(f"Prompt {name!r} is missing values for: {', '.join(sorted(missing))}")

    def _replace(match: re.Match[str]) -> str:
        value = values[match.group(1)]
        return "" if value is None else str(value)

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


__all__ = ["load_prompt", "template_fields", "PROMPTS_DIR"]
