"""Which cues are on screen at the current playback time, and where."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from . import config
from .models import Cue, Position
from .playback import PlaybackClock

# Offset from the bottom edge of the player, in percent
_BOTTOM_OFFSETS = {
    Position.BOTTOM: 0.0,
    Position.TOP: 80.0,
    Position.MIDDLE: 50.0,
}


@dataclass(frozen=True)
class ScreenAnchor:
    bottom_pct: float
    left_pct: float = 50.0

    @classmethod
    def for_position(cls, position: Position | str) -> "ScreenAnchor":
        return cls(bottom_pct=_BOTTOM_OFFSETS[Position(position)])


@dataclass(frozen=True)
class VisibleCue:
    cue: Cue
    anchor: ScreenAnchor

    def style(self) -> dict[str, str]:
        """Overlay styling matching the burned-in box."""
        return {
            "position": "absolute",
            "bottom": f"{self.anchor.bottom_pct:g}%",
            "left": f"{self.anchor.left_pct:g}%",
            "transform": "translate(-50%, -50%)",
            "color": self.cue.font_color,
            "font-size": f"{self.cue.font_size}px",
            "text-align": "center",
            "white-space": "pre-wrap",
            "background": config.PREVIEW_BACKGROUND,
        }


def resolve_visible(cues: Iterable[Cue], current_time: float) -> list[VisibleCue]:
    return [
        VisibleCue(cue=cue, anchor=ScreenAnchor.for_position(cue.position))
        for cue in cues
        if not cue.is_blank and cue.is_active(current_time)
    ]


class PreviewResolver:
    def __init__(self, clock: PlaybackClock) -> None:
        self.clock = clock

    def visible(self, cues: Iterable[Cue]) -> list[VisibleCue]:
        return resolve_visible(cues, self.clock.current_time)
