"""Human-readable formatting for sizes, durations and download names."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import PurePath

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(num_bytes / 1024**exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def format_processing_time(elapsed: timedelta) -> str:
    seconds = int(elapsed.total_seconds())
    minutes, remaining = divmod(seconds, 60)
    if minutes:
        return f"{minutes}m {remaining}s"
    return f"{seconds}s"


def unique_filename(original_name: str, suffix: str = "", now: datetime | None = None) -> str:
    """Append ``suffix`` and a timestamp to ``original_name``, keeping its extension."""
    moment = now or datetime.now(timezone.utc)
    stamp = moment.strftime("%Y-%m-%dT%H-%M-%S")
    path = PurePath(original_name)
    return f"{path.stem}{suffix}_{stamp}{path.suffix}"
