"""Error taxonomy and helpers for user-visible failure messages."""

from __future__ import annotations

import re

# Regex to detect internal paths (Unix/Linux focus)
_PATH_PATTERN = re.compile(r"(\/(?:app|home|var|tmp|usr|etc|opt|root|private)\/[\w\-\.\/]+)")


class StudioError(Exception):
    """Base class for every error raised by the subtitle studio."""


class IndexOutOfRange(StudioError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Cue index {index} is out of range for {size} cue(s)")
        self.index = index
        self.size = size


class InvalidCueError(StudioError, ValueError):
    """Raised when cue fields fail validation."""


class NoVideoLoadedError(StudioError):
    """Raised when a render is requested before a source video was uploaded."""


class TranscoderError(StudioError):
    """Base class for failures reported by the transcoder."""


class StagingError(TranscoderError):
    """A resource could not be read or was rejected by the transcoder."""


class EncodeError(TranscoderError):
    """The transcoder reported a failure while encoding."""

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message)
        self.diagnostic = diagnostic


class NotFoundError(TranscoderError):
    """A requested file is absent from the transcoder's working space."""


def sanitize_message(msg: str) -> str:
    """
    Sanitize string messages to prevent leaking internal details.
    """
    if _PATH_PATTERN.search(msg):
        return _PATH_PATTERN.sub("[INTERNAL_PATH]", msg)
    return msg
