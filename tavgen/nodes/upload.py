"""Node sending the user's photo to the provider."""

from __future__ import annotations

from typing import Optional

from ..services.base import VideoProvider
from ..types import InlinedImage, RunState
from .base import BaseNode, ReportProgress


class UploadImage(BaseNode):
    """Turns the request photo into a provider image reference."""

    def __init__(self, run_id: str, logger, provider: VideoProvider) -> None:
        super().__init__(
            step_id="upload-image",
            step_name="Uploading Image",
            run_id=run_id,
            logger=logger,
            start_progress=25,
            start_message="Preparing your photo...",
            done_message="Photo uploaded successfully",
        )
        self._provider = provider

    async def run(self, state: RunState, report: ReportProgress) -> RunState:
        image = state.request.image
        self.log_request({"name": image.name, "content_type": image.mime_type, "size": image.size})

        state.image_ref = await self._provider.prepare_image(image)

        self.log_response(
            {
                "kind": type(state.image_ref).__name__,
                # Inline data URLs can be megabytes long.
                "source_url": state.image_ref.source_url[:120],
            }
        )
        return state

    def completion_message(self, state: RunState) -> Optional[str]:
        if isinstance(state.image_ref, InlinedImage):
            return "Photo embedded inline (upload unavailable)"
        return self.done_message
