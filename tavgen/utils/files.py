"""File system and encoding helpers for run traces and downloads."""

from __future__ import annotations

import base64
import json
import os
from dataclasses import asdict, is_dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any


def ensure_dir(path: str | Path) -> Path:
    """Create the directory if it does not exist."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def read_binary(path: str | Path) -> bytes:
    return Path(path).read_bytes()


def write_binary(path: str | Path, data: bytes) -> Path:
    """Write ``data`` next to its final name first, then swap it into place."""
    target = Path(path)
    ensure_dir(target.parent)
    partial = target.with_name(target.name + ".part")
    partial.write_bytes(data)
    os.replace(partial, target)
    return target


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return str(value)


def to_json(data: Any, *, indent: int | None = 2) -> str:
    """Serialize trace payloads, tolerating enums, dataclasses and raw bytes."""
    return json.dumps(data, indent=indent, ensure_ascii=False, default=_json_default)


def write_json(path: str | Path, data: Any) -> Path:
    return write_binary(path, to_json(data).encode("utf-8"))


def append_json_line(path: str | Path, data: Any) -> Path:
    """Append one compact JSON document to a JSON Lines file."""
    target = Path(path)
    ensure_dir(target.parent)
    with open(target, "a", encoding="utf-8") as handle:
        handle.write(to_json(data, indent=None) + "\n")
    return target


def to_data_url(data: bytes, mime_type: str | None) -> str:
    """Return a ``data:`` URL embedding ``data`` as base64."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or 'application/octet-stream'};base64,{encoded}"
