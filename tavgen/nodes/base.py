"""Node abstractions shared by concrete pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from ..types import RunState
from ..utils.run_logger import RunLogger

ReportProgress = Callable[[int, Optional[str]], Awaitable[None]]


class Node(Protocol):
    """A pipeline step that mutates the shared run state."""

    step_id: str
    step_name: str
    start_progress: int
    start_message: Optional[str]

    async def run(self, state: RunState, report: ReportProgress) -> RunState:
        ...

    def completion_message(self, state: RunState) -> Optional[str]:
        ...


@dataclass(slots=True)
class BaseNode:
    """Convenience base for nodes needing trace logging support."""

    step_id: str
    step_name: str
    run_id: str
    logger: RunLogger
    start_progress: int = 0
    start_message: Optional[str] = None
    done_message: Optional[str] = None

    def completion_message(self, state: RunState) -> Optional[str]:
        return self.done_message

    def log_request(self, payload: Any) -> None:
        """Persist what was sent to the provider."""
        self.logger.log_request(self.run_id, self.step_id, payload)

    def log_response(self, response: Any) -> None:
        """Persist what came back."""
        self.logger.log_response(self.run_id, self.step_id, response)

    def log_event(self, event: Any) -> None:
        self.logger.log_event(self.run_id, self.step_id, event)
