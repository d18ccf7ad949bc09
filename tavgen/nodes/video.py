"""Nodes handling talk submission, status polling, and result assembly."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from ..errors import GenerationCancelled, GenerationTimeoutError, ProviderError
from ..services.base import VideoProvider
from ..types import GenerationResult, JobState, JobStatus, ResultStatus, RunState
from .base import BaseNode, ReportProgress

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

POLL_PROGRESS_CAP = 95
ACTIVE_JOB_MIN_PROGRESS = 20


class GenerateVideo(BaseNode):
    """Submits the talk job, then polls until it reaches a terminal state."""

    def __init__(
        self,
        run_id: str,
        logger,
        provider: VideoProvider,
        *,
        poll_interval: float = 5.0,
        max_poll_attempts: int = 60,
        sleep: Sleep = asyncio.sleep,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        super().__init__(
            step_id="generate-video",
            step_name="Generating Talking Video",
            run_id=run_id,
            logger=logger,
            start_progress=10,
            start_message="Creating your talking avatar...",
            done_message="Video generated!",
        )
        self._provider = provider
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep
        self._cancel = cancel

    async def run(self, state: RunState, report: ReportProgress) -> RunState:
        request = state.request
        if state.image_ref is None or state.script is None:
            raise RuntimeError("GenerateVideo requires an uploaded image and a processed script.")

        state.job_id = await self._provider.submit_job(
            state.image_ref,
            state.script,
            request.emotion,
            request.voice_settings,
            request.language,
        )
        self.log_request(
            {
                "job_id": state.job_id,
                "emotion": request.emotion.id,
                "language": request.language.value,
                "voice_settings": request.voice_settings,
                "script": state.script,
            }
        )
        logger.info("Submitted job %s, polling every %.1fs", state.job_id, self._poll_interval)

        state.job = await self._wait_for_job(state.job_id, report)
        return state

    async def _wait_for_job(self, job_id: str, report: ReportProgress) -> JobStatus:
        last_error: Optional[ProviderError] = None

        for attempt in range(self._max_poll_attempts):
            try:
                job = await self._provider.poll_job(job_id)
            except ProviderError as exc:
                last_error = exc
                logger.warning("Poll attempt %d for %s failed: %s", attempt + 1, job_id, exc)
                self.log_event({"attempt": attempt + 1, "error": str(exc), "status_code": exc.status_code})
            else:
                last_error = None
                logger.debug("Poll attempt %d for %s: status=%s", attempt + 1, job_id, job.state.value)
                self.log_event(
                    {
                        "attempt": attempt + 1,
                        "status": job.state.value,
                        "result_url": job.result_url,
                        "error": job.error_detail,
                    }
                )
                if job.state.terminal:
                    self.log_response(job)
                    if job.state is JobState.DONE:
                        if not job.result_url:
                            raise ProviderError(f"Job {job_id} finished without a result URL")
                        return job
                    raise ProviderError(f"Video generation failed: {job.error_detail or 'Unknown error'}")
                await report(self._poll_progress(attempt, job.state), "Generating video...")

            if attempt < self._max_poll_attempts - 1:
                await self._wait()

        if self._cancel is not None and self._cancel.is_set():
            raise GenerationCancelled("Generation cancelled")
        if last_error is not None:
            raise last_error
        raise GenerationTimeoutError(
            f"Video generation timed out after {self._max_poll_attempts} status checks. Please try again."
        )

    def _poll_progress(self, attempt: int, job_state: JobState) -> int:
        progress = min(POLL_PROGRESS_CAP, attempt / self._max_poll_attempts * 100)
        if job_state in (JobState.CREATED, JobState.STARTED):
            progress = max(progress, ACTIVE_JOB_MIN_PROGRESS)
        return int(progress)

    async def _wait(self) -> None:
        """Sleep one poll interval, waking early if the run is cancelled."""
        if self._cancel is None:
            await self._sleep(self._poll_interval)
            return
        if self._cancel.is_set():
            raise GenerationCancelled("Generation cancelled")

        sleeper = asyncio.ensure_future(self._sleep(self._poll_interval))
        watcher = asyncio.ensure_future(self._cancel.wait())
        try:
            done, _ = await asyncio.wait({sleeper, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            watcher.cancel()
        if watcher in done:
            raise GenerationCancelled("Generation cancelled")


class Finalize(BaseNode):
    """Packages the finished job into a ``GenerationResult``."""

    def __init__(self, run_id: str, logger, clock: Callable[[], float] = time.perf_counter) -> None:
        super().__init__(
            step_id="finalize",
            step_name="Finalizing Video",
            run_id=run_id,
            logger=logger,
            start_progress=90,
            start_message="Finalizing...",
            done_message="Complete!",
        )
        self._clock = clock

    async def run(self, state: RunState, report: ReportProgress) -> RunState:
        job = state.job
        if job is None or not job.result_url:
            raise RuntimeError("Finalize requires a completed provider job.")

        state.result = GenerationResult(
            video_url=job.result_url,
            audio_url=job.audio_url or "",
            status=ResultStatus.COMPLETED,
            processing_time=timedelta(seconds=max(0.0, self._clock() - state.started_at)),
        )
        self.log_response(
            {
                "video_url": state.result.video_url,
                "audio_url": state.result.audio_url,
                "processing_time_sec": state.result.processing_time.total_seconds(),
            }
        )
        return state
