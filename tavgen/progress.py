"""Step status bookkeeping for a single generation run."""

from __future__ import annotations

import inspect
from dataclasses import replace
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple, Union

from .types import ProcessingStep, StepStatus

StepSnapshot = Tuple[ProcessingStep, ...]
ProgressCallback = Callable[[StepSnapshot], Union[None, Awaitable[None]]]


class StepTracker:
    """Owns the ordered step list of one run and publishes it after every change.

    Steps are frozen records; each transition swaps in a new record, so the
    tuple handed to ``on_progress`` stays valid after the run moves on.
    """

    def __init__(self, steps: Iterable[ProcessingStep], on_progress: Optional[ProgressCallback] = None) -> None:
        self._steps: List[ProcessingStep] = list(steps)
        self._on_progress = on_progress

    @property
    def steps(self) -> StepSnapshot:
        return tuple(self._steps)

    @property
    def active(self) -> Optional[ProcessingStep]:
        return next((step for step in self._steps if step.status is StepStatus.PROCESSING), None)

    async def start(self, step_id: str, progress: int, message: Optional[str] = None) -> None:
        index = self._index(step_id)
        active = self.active
        if active is not None and active.id != step_id:
            raise RuntimeError(f"Cannot start {step_id!r} while {active.id!r} is processing")
        unfinished = [step.id for step in self._steps[:index] if step.status is not StepStatus.COMPLETED]
        if unfinished:
            raise RuntimeError(f"Cannot start {step_id!r} before {', '.join(unfinished)} completed")
        await self._update(index, status=StepStatus.PROCESSING, progress=progress, message=message)

    async def advance(self, step_id: str, progress: int, message: Optional[str] = None) -> None:
        """Report intermediate progress for the step currently processing."""
        index = self._index(step_id)
        if self._steps[index].status is not StepStatus.PROCESSING:
            raise RuntimeError(f"Step {step_id!r} is not processing")
        await self._update(index, progress=progress, message=message or self._steps[index].message)

    async def complete(self, step_id: str, message: Optional[str] = None) -> None:
        index = self._index(step_id)
        await self._update(
            index,
            status=StepStatus.COMPLETED,
            progress=100,
            message=message or self._steps[index].message,
        )

    async def fail(self, step_id: str, message: str) -> None:
        await self._update(self._index(step_id), status=StepStatus.ERROR, message=message)

    def _index(self, step_id: str) -> int:
        for index, step in enumerate(self._steps):
            if step.id == step_id:
                return index
        raise KeyError(f"Unknown step {step_id!r}")

    async def _update(self, index: int, **changes: object) -> None:
        if "progress" in changes:
            changes["progress"] = max(0, min(100, int(changes["progress"])))
        self._steps[index] = replace(self._steps[index], **changes)
        await self._publish()

    async def _publish(self) -> None:
        if self._on_progress is None:
            return
        outcome = self._on_progress(self.steps)
        if inspect.isawaitable(outcome):
            await outcome
