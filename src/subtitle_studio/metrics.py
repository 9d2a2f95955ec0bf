"""Per-render timing rows, appended to a local JSONL file in dev."""

from __future__ import annotations

import json
import os
import socket
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from .settings import settings


def should_log_metrics() -> bool:
    """
    Decide whether to emit local metrics.
    - Explicit override via ``settings.metrics_enabled``.
    - Skip during pytest unless explicitly enabled.
    - Otherwise, log in dev environments only.
    """
    if settings.metrics_enabled is not None:
        return settings.metrics_enabled

    if "PYTEST_CURRENT_TEST" in os.environ:
        return False

    return settings.is_dev


def _resolve_log_path() -> Path:
    if settings.metrics_path:
        return Path(settings.metrics_path).expanduser().resolve()
    return (settings.project_root / "logs" / "render_metrics.jsonl").resolve()


@contextmanager
def measure_time(
    timings_dict: dict[str, float], key: str
) -> Generator[None, None, None]:
    """
    Context manager to measure execution time and store it in a dictionary.

    Usage:
        with measure_time(timings, "encode_s"):
            do_work()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        timings_dict[key] = time.perf_counter() - start


@dataclass
class RenderMetrics:
    """Collects what one render attempt did, for a single metrics row."""

    cue_count: int
    input_bytes: int
    duration_s: float = 0.0
    filter_stage: bool = False
    output_bytes: int | None = None
    error: str | None = None
    timings: dict[str, float] = field(default_factory=dict)
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def step(self, name: str):
        return measure_time(self.timings, f"{name}_s")

    def finish(self) -> None:
        self.timings["total_s"] = time.perf_counter() - self._started

    def row(self) -> dict[str, Any]:
        return {
            "status": "error" if self.error else "success",
            "error": self.error,
            "cue_count": self.cue_count,
            "filter_stage": self.filter_stage,
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "duration_s": self.duration_s,
            "timings": dict(self.timings),
        }


def log_render_metrics(render_metrics: RenderMetrics) -> None:
    """Append one JSONL row for a finished render; never raises."""
    if not should_log_metrics():
        return

    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "host": socket.gethostname(),
        "app_env": settings.app_env.value,
        **render_metrics.row(),
    }

    path = _resolve_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(payload, ensure_ascii=False))
            fh.write("\n")
    except OSError:
        # Best-effort logging; the render never fails because of metrics.
        return
