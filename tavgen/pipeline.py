"""Pipeline orchestration for the TalkingAvatarGenerator."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from .config import GeneratorConfig
from .errors import GenerationCancelled
from .nodes.base import Node
from .nodes.script import ProcessScript
from .nodes.upload import UploadImage
from .nodes.video import Finalize, GenerateVideo, Sleep
from .progress import ProgressCallback, StepTracker
from .services.base import VideoProvider
from .services.did import DIDClient
from .types import GenerationRequest, GenerationResult, ProcessingStep, RunState
from .utils.files import to_json
from .utils.run_logger import RunLogger

logger = logging.getLogger(__name__)


class TalkingAvatarGenerator:
    """High-level facade exposing the end-to-end generation flow.

    One instance may serve many requests, but a single ``run`` is not
    re-entrant with respect to the caller's progress handling; callers
    should not start overlapping runs that share a progress callback.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        provider: VideoProvider | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config or GeneratorConfig.from_env()
        self.logger = RunLogger(base_dir=self.config.runs_dir)
        self._owned_client: Optional[DIDClient] = None
        if provider is None:
            provider = self._owned_client = DIDClient.from_config(self.config)
        self.provider: VideoProvider = provider
        self._sleep = sleep
        self._clock = clock

    async def __aenter__(self) -> "TalkingAvatarGenerator":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the provider client, unless the caller supplied it."""
        if self._owned_client is not None:
            await self._owned_client.aclose()

    async def run(
        self,
        request: GenerationRequest,
        on_progress: Optional[ProgressCallback] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """Execute every step in order and return the finished video.

        ``on_progress`` receives a tuple of step records after each
        transition. Setting ``cancel`` stops the run at the next step
        boundary or poll wait with ``GenerationCancelled``.
        """
        self.provider.ensure_configured()

        run_id = self._new_run_id()
        nodes = self._build_nodes(run_id=run_id, cancel=cancel)
        if not nodes:
            raise RuntimeError("Pipeline has no nodes configured.")

        tracker = StepTracker(
            (ProcessingStep(id=node.step_id, name=node.step_name) for node in nodes),
            on_progress,
        )
        state = RunState(request=request, started_at=self._clock())
        logger.info("Starting run %s for emotion %s", run_id, request.emotion.id)

        for node in nodes:
            state = await self._invoke_node(node, state, tracker, cancel)

        if state.result is None:
            raise RuntimeError(f"Run {run_id} finished without a result.")
        logger.info("Run %s completed: %s", run_id, state.result.video_url)
        return state.result

    def _build_nodes(self, *, run_id: str, cancel: Optional[asyncio.Event]) -> Sequence[Node]:
        """Construct node instances wired with the current services."""
        return [
            UploadImage(run_id=run_id, logger=self.logger, provider=self.provider),
            ProcessScript(run_id=run_id, logger=self.logger),
            GenerateVideo(
                run_id=run_id,
                logger=self.logger,
                provider=self.provider,
                poll_interval=self.config.poll_interval,
                max_poll_attempts=self.config.max_poll_attempts,
                sleep=self._sleep,
                cancel=cancel,
            ),
            Finalize(run_id=run_id, logger=self.logger, clock=self._clock),
        ]

    async def _invoke_node(
        self,
        node: Node,
        state: RunState,
        tracker: StepTracker,
        cancel: Optional[asyncio.Event],
    ) -> RunState:
        """Execute a node while keeping its step record in sync."""
        await tracker.start(node.step_id, node.start_progress, node.start_message)

        async def report(progress: int, message: Optional[str] = None) -> None:
            await tracker.advance(node.step_id, progress, message)

        started = time.perf_counter()
        try:
            if cancel is not None and cancel.is_set():
                raise GenerationCancelled("Generation cancelled")
            updated_state = await node.run(state, report)
        except asyncio.CancelledError:
            await tracker.fail(node.step_id, "Generation cancelled")
            raise
        except Exception as exc:
            logger.error("Step %s failed: %s", node.step_id, exc)
            await tracker.fail(node.step_id, str(exc) or type(exc).__name__)
            raise
        elapsed = time.perf_counter() - started

        await tracker.complete(node.step_id, node.completion_message(updated_state))
        self._log_step_io(node.step_id, tracker.steps, elapsed)
        return updated_state

    def _log_step_io(self, step: str, steps: Sequence[ProcessingStep], elapsed: float) -> None:
        """Emit the step table at debug level."""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        body = to_json(list(steps), indent=None)
        logger.debug("[%s] done in %.2fs: %s", step, elapsed, body)

    @staticmethod
    def _new_run_id() -> str:
        """Return a simple unique run identifier."""
        return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
