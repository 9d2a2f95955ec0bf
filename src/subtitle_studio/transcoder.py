"""Transcoder contract and its ffmpeg-backed implementation."""

from __future__ import annotations

import json
import logging
import re
import select
import shutil
import subprocess
import tempfile
import time
from collections import deque
from pathlib import Path
from typing import Callable, Protocol, Sequence

from . import config
from .errors import EncodeError, NotFoundError, StagingError
from .settings import settings

logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"time=(\d{2}):(\d{2}):(\d{2}\.\d{2})")

LogCallback = Callable[[str, str], None]


class Transcoder(Protocol):
    on_log: LogCallback | None

    def stage(self, name: str, data: bytes) -> None: ...

    def run(self, args: Sequence[str]) -> None: ...

    def read(self, name: str) -> bytes: ...


def parse_progress(line: str, total_duration: float | None) -> float | None:
    """Percentage encoded so far, from an ffmpeg ``time=`` status line."""
    if not total_duration or total_duration <= 0:
        return None
    # Fast string check before the regex
    if "time=" not in line:
        return None
    match = TIME_PATTERN.search(line)
    if not match:
        return None
    h, m, s = match.groups()
    current_seconds = int(h) * 3600 + int(m) * 60 + float(s)
    return min(100.0, (current_seconds / total_duration) * 100.0)


def probe_media(input_path: Path, *, binary: str | None = None) -> float | None:
    """Return the container duration in seconds, or None when unknown."""
    probe_cmd = [
        binary or settings.ffprobe_binary,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "json",
        str(input_path),
    ]
    result = subprocess.run(
        probe_cmd,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    payload = json.loads(result.stdout or "{}")
    try:
        duration_raw = (payload.get("format") or {}).get("duration")
        return float(duration_raw) if duration_raw is not None else None
    except (TypeError, ValueError):
        return None


class FFmpegTranscoder:
    """
    Runs the ffmpeg binary inside a private scratch directory.

    The directory plays the role of the engine's input space: ``stage``
    writes files into it, ``run`` executes ffmpeg with it as the working
    directory and ``read`` fetches results back.
    """

    def __init__(
        self,
        workdir: Path | None = None,
        *,
        binary: str | None = None,
        timeout: float | None = None,
        on_log: LogCallback | None = None,
    ) -> None:
        self.binary = binary or settings.ffmpeg_binary
        self.timeout = settings.encode_timeout_s if timeout is None else timeout
        self.on_log = on_log
        self._owns_workdir = workdir is None
        self.workdir = Path(workdir) if workdir else Path(tempfile.mkdtemp(prefix="subtitle-studio-"))

    def __enter__(self) -> "FFmpegTranscoder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_workdir and self.workdir.exists():
            shutil.rmtree(self.workdir, ignore_errors=True)

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name or name in {".", ".."}:
            raise StagingError(f"Invalid transcoder file name: {name!r}")
        return self.workdir / name

    def stage(self, name: str, data: bytes) -> None:
        path = self._path(name)
        try:
            self.workdir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StagingError(f"Could not stage {name}: {exc}") from exc
        logger.debug("Staged %s (%d bytes)", name, len(data))

    def read(self, name: str) -> bytes:
        try:
            path = self._path(name)
        except StagingError as exc:
            raise NotFoundError(str(exc)) from exc
        if not path.is_file():
            raise NotFoundError(f"{name} was not produced by ffmpeg")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise NotFoundError(f"Could not read {name}: {exc}") from exc

    def _emit(self, kind: str, message: str) -> None:
        if self.on_log:
            self.on_log(kind, message)

    def run(self, args: Sequence[str]) -> None:
        cmd = [self.binary, "-y", "-hide_banner", *args]
        self._emit("command", " ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                cwd=self.workdir,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                universal_newlines=True,
                bufsize=1,  # Line buffered
            )
        except OSError as exc:
            raise EncodeError(f"Could not start {self.binary}: {exc}") from exc

        # Keep only the tail of stderr for diagnostics
        stderr_lines: deque[str] = deque(maxlen=config.MAX_DIAGNOSTIC_LINES)
        started = time.monotonic()

        try:
            if process.stderr:
                while True:
                    if self.timeout and time.monotonic() - started > self.timeout:
                        process.kill()
                        raise EncodeError(
                            f"FFmpeg process timed out after {self.timeout}s",
                            "".join(stderr_lines),
                        )

                    # Non-blocking read so a hung ffmpeg still hits the timeout
                    reads, _, _ = select.select([process.stderr], [], [], 0.1)
                    if reads:
                        line = process.stderr.readline()
                        if not line:
                            break
                        stderr_lines.append(line)
                        self._emit("stderr", line.rstrip("\n"))
                    elif process.poll() is not None:
                        break

            process.wait()
        except Exception as exc:
            # Ensure process is killed on any error
            if process.poll() is None:
                process.kill()
            process.wait()
            if isinstance(exc, EncodeError):
                raise
            raise EncodeError(f"Lost contact with ffmpeg: {exc}", "".join(stderr_lines)) from exc

        if process.returncode != 0:
            diagnostic = "".join(stderr_lines)
            raise EncodeError(
                f"ffmpeg exited with status {process.returncode}", diagnostic
            )
