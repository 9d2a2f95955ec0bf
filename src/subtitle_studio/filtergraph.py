"""Compile cues into a single ffmpeg ``drawtext`` filter chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from . import config
from .models import Cue, Position
from .settings import settings

_ESCAPES = str.maketrans({"'": r"\'", ":": r"\:"})

_Y_EXPRESSIONS = {
    Position.TOP: "text_h",
    Position.BOTTOM: "h-text_h",
    Position.MIDDLE: "(h-text_h)/2",
}

X_CENTERED = "(w-text_w)/2"


@dataclass(frozen=True)
class CompiledFilterGraph:
    expression: str
    font: str

    @property
    def is_empty(self) -> bool:
        return not self.expression


def escape_text(text: str) -> str:
    return text.translate(_ESCAPES)


def position_y(position: Position | str) -> str:
    return _Y_EXPRESSIONS[Position(position)]


def color_token(color: str) -> str:
    """``#RRGGBB`` -> ``0xRRGGBB``."""
    return color.replace("#", "0x", 1)


def format_seconds(value: float) -> str:
    """Shortest exact decimal for ``value``, without a trailing ``.0``."""
    text = repr(float(value))
    if "e" in text:
        text = f"{value:.20f}".rstrip("0")
    text = text.removesuffix(".0").rstrip(".")
    return text or "0"


def build_clause(
    cue: Cue,
    font: str,
    *,
    box_color: str | None = None,
    box_border_width: int | None = None,
) -> str:
    box_color = box_color or settings.box_color
    if box_border_width is None:
        box_border_width = settings.box_border_width
    enable = f"between(t,{format_seconds(cue.start_time)},{format_seconds(cue.end_time)})"
    return (
        f"drawtext=fontfile={font}"
        f":text='{escape_text(cue.text)}'"
        f":fontcolor={color_token(cue.font_color)}"
        f":fontsize={cue.font_size}"
        f":x={X_CENTERED}:y={position_y(cue.position)}"
        f":enable='{enable}'"
        f":box=1:boxcolor={box_color}:boxborderw={box_border_width}"
    )


def compile_filtergraph(
    cues: Iterable[Cue],
    font: str = config.DEFAULT_FONT_FILE,
    *,
    box_color: str | None = None,
    box_border_width: int | None = None,
) -> CompiledFilterGraph:
    """
    Join one clause per cue, in insertion order, with the filter-chain
    separator. Later clauses draw on top of earlier ones. Blank cues are
    skipped; no cues yields an empty expression.
    """
    clauses = [
        build_clause(cue, font, box_color=box_color, box_border_width=box_border_width)
        for cue in cues
        if not cue.is_blank
    ]
    return CompiledFilterGraph(expression=",".join(clauses), font=font)
