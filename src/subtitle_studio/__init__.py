"""Timed subtitle overlays: timeline editing, live preview and ffmpeg burn-in."""

from .models import Cue, Position

__all__ = ["Cue", "Position"]
