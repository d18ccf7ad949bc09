"""Per-run trace files for provider traffic."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .files import append_json_line, ensure_dir, write_json


@dataclass(slots=True)
class StepLogPaths:
    """Trace files belonging to one pipeline step."""

    request_path: Path
    response_path: Path
    events_path: Path


class RunLogger:
    """Writes what each step sent and received under ``<base_dir>/<run_id>/``.

    ``request`` and ``response`` hold the latest payload for a step, while
    ``events`` keeps every intermediate record (one poll per line).
    """

    def __init__(self, base_dir: str | Path = "runs") -> None:
        self._base_dir = ensure_dir(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def run_dir(self, run_id: str) -> Path:
        return ensure_dir(self._base_dir / run_id)

    def step_paths(self, run_id: str, step_name: str) -> StepLogPaths:
        root = self.run_dir(run_id)
        return StepLogPaths(
            request_path=root / f"{step_name}-request.json",
            response_path=root / f"{step_name}-response.json",
            events_path=root / f"{step_name}-events.jsonl",
        )

    def log_request(self, run_id: str, step_name: str, request: Any) -> None:
        write_json(self.step_paths(run_id, step_name).request_path, request)

    def log_response(self, run_id: str, step_name: str, response: Any) -> None:
        write_json(self.step_paths(run_id, step_name).response_path, response)

    def log_event(self, run_id: str, step_name: str, event: Any) -> None:
        append_json_line(self.step_paths(run_id, step_name).events_path, event)
