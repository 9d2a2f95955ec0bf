"""Cue model shared by the timeline, preview and filter graph compiler."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from . import config
from .errors import InvalidCueError


class Position(StrEnum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class Cue(BaseModel):
    """A timed text overlay. Times are seconds from the start of the video."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    start_time: float = Field(default=0.0, ge=0)
    end_time: float = Field(default=0.0, ge=0)
    font_size: int = Field(default=config.DEFAULT_FONT_SIZE, gt=0)
    font_color: str = Field(default=config.DEFAULT_FONT_COLOR, pattern=r"^#[0-9A-Fa-f]{6}$")
    position: Position = Position(config.DEFAULT_POSITION)

    @model_validator(mode="after")
    def _check_range(self) -> "Cue":
        if self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must not be before start_time ({self.start_time})"
            )
        return self

    @classmethod
    def blank(cls) -> "Cue":
        """The reset draft: empty text, zero times, default styling."""
        return cls()

    @classmethod
    def build(cls, **fields: Any) -> "Cue":
        """Validate raw field values, raising InvalidCueError on bad input."""
        try:
            return cls.model_validate(fields)
        except ValidationError as exc:
            raise InvalidCueError(str(exc)) from exc

    def replace(self, **changes: Any) -> "Cue":
        """Return a validated copy with ``changes`` applied."""
        return Cue.build(**{**self.model_dump(), **changes})

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def is_active(self, t: float) -> bool:
        return self.start_time <= t <= self.end_time

    def exceeds(self, duration: float) -> bool:
        """True when a resolved duration is known and either time lies past it."""
        if duration <= 0:
            return False
        return self.start_time > duration or self.end_time > duration

    def label(self) -> str:
        return f"[{self.start_time:.1f}s ~ {self.end_time:.1f}s] {self.text}"
