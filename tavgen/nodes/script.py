"""Node choosing the text the avatar will speak."""

from __future__ import annotations

from ..errors import ValidationError
from ..types import RunState
from .base import BaseNode, ReportProgress


class ProcessScript(BaseNode):
    """Prefers the enhanced script over the user's original wording."""

    def __init__(self, run_id: str, logger) -> None:
        super().__init__(
            step_id="process-script",
            step_name="Processing Script",
            run_id=run_id,
            logger=logger,
            start_progress=50,
            start_message="Processing your script...",
            done_message="Script ready",
        )

    async def run(self, state: RunState, report: ReportProgress) -> RunState:
        request = state.request
        script = request.final_script
        if not script.strip():
            raise ValidationError("Please enter a script for your video")

        state.script = script
        self.log_response(
            {
                "script": script,
                "enhanced": bool(request.enhanced_script),
                "language": request.language.value,
            }
        )
        return state
