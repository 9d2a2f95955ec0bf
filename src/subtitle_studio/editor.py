"""Editor session: the command/accessor surface handed to a presentation layer."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any

from .models import Cue
from .playback import PlaybackClock
from .preview import PreviewResolver, VisibleCue
from .render import RenderArtifact, RenderOrchestrator, RenderState
from .timeline import TimelineModel

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Owns one timeline, one playback clock and one render orchestrator.

    A UI reads state through the properties and changes it only through
    the command methods.
    """

    def __init__(
        self,
        orchestrator: RenderOrchestrator,
        *,
        clock: PlaybackClock | None = None,
        timeline: TimelineModel | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.clock = clock or PlaybackClock()
        self.timeline = timeline or TimelineModel()
        self.preview = PreviewResolver(self.clock)
        self._source: bytes | None = None

    # -- accessors -------------------------------------------------------

    @property
    def cues(self) -> tuple[Cue, ...]:
        return self.timeline.cues

    @property
    def draft(self) -> Cue:
        return self.timeline.draft

    @property
    def edit_target(self) -> int | None:
        return self.timeline.edit_target

    @property
    def duration(self) -> float:
        return self.clock.duration

    @property
    def current_time(self) -> float:
        return self.clock.current_time

    @property
    def has_video(self) -> bool:
        return self._source is not None

    @property
    def render_state(self) -> RenderState:
        return self.orchestrator.state

    @property
    def artifact(self) -> RenderArtifact | None:
        return self.orchestrator.artifact

    @property
    def failure(self) -> str | None:
        return self.orchestrator.failure

    def effective_cues(self) -> list[Cue]:
        return self.timeline.effective_cues()

    def visible_cues(self) -> list[VisibleCue]:
        return self.preview.visible(self.effective_cues())

    # -- commands --------------------------------------------------------

    def upload_video(self, data: bytes) -> None:
        self._source = data
        self.clock.reset()
        self.orchestrator.reset()
        logger.info("Loaded source video (%d bytes)", len(data))

    def add_cue(self, cue: Cue) -> int:
        self._warn_if_past_end(cue)
        return self.timeline.add_cue(cue)

    def begin_edit(self, index: int) -> None:
        self.timeline.begin_edit(index)

    def cancel_edit(self) -> None:
        self.timeline.cancel_edit()

    def update_draft(self, **fields: Any) -> Cue:
        """
        Merge changed fields into the draft. Raises InvalidCueError.

        Moving one end of the range past the other drags the other end
        along, so times can be set in any order.
        """
        current = self.timeline.draft
        start = fields.get("start_time", current.start_time)
        end = fields.get("end_time", current.end_time)
        if isinstance(start, (int, float)) and isinstance(end, (int, float)) and end < start:
            if "end_time" not in fields:
                fields["end_time"] = start
            elif "start_time" not in fields:
                fields["start_time"] = end
        draft = current.replace(**fields)
        self.timeline.set_draft(draft)
        return draft

    def stamp_current_time(self) -> Cue:
        """Start the draft at the playback position, ending ``offset`` later."""
        start, end = self.clock.seed_range()
        return self.update_draft(start_time=start, end_time=end)

    def commit_draft(self) -> int | None:
        self._warn_if_past_end(self.timeline.draft)
        return self.timeline.commit_draft()

    def delete_cue(self, index: int) -> Cue:
        removed = self.timeline.delete_cue(index)
        target = self.timeline.edit_target
        if target is not None and target >= index:
            # The pending edit points at the removed cue or a shifted one
            self.timeline.cancel_edit()
        return removed

    def start_render(self) -> Future | None:
        return self.orchestrator.start_render(
            self._source, self.timeline.cues, total_duration=self.clock.duration
        )

    def _warn_if_past_end(self, cue: Cue) -> None:
        if cue.exceeds(self.clock.duration):
            logger.warning(
                "Cue %s extends past the video duration (%.3fs); kept as entered",
                cue.label(),
                self.clock.duration,
            )
