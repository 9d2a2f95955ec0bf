"""Bridges an external playback position/duration signal into the studio."""

from __future__ import annotations

import logging
from typing import Protocol

from .settings import settings

logger = logging.getLogger(__name__)


class TimeProvider(Protocol):
    def current_time(self) -> float: ...


class PlaybackClock:
    """
    Read-only view of the player's duration and current time.

    The player pushes updates through ``on_time_update`` and
    ``on_duration_resolved``; when a ``TimeProvider`` is injected ``poll``
    pulls the position instead. Values are passed through unvalidated.
    """

    def __init__(self, provider: TimeProvider | None = None, *, offset: float | None = None) -> None:
        self._provider = provider
        self.offset = settings.cue_offset_s if offset is None else offset
        self._duration = 0.0
        self._current_time = 0.0

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def current_time(self) -> float:
        return self._current_time

    def on_time_update(self, t: float) -> None:
        self._current_time = t

    def on_duration_resolved(self, duration: float) -> None:
        logger.info("Video duration resolved: %.3fs", duration)
        self._duration = duration

    def poll(self) -> float:
        if self._provider is not None:
            self.on_time_update(self._provider.current_time())
        return self._current_time

    def reset(self) -> None:
        self._duration = 0.0
        self._current_time = 0.0

    def seed_range(self) -> tuple[float, float]:
        """Default (start, end) for a cue stamped at the current position."""
        return self._current_time, self._current_time + self.offset
