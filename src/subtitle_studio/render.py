"""Render orchestration: staging, compiling and encoding one burn-in."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Callable, Iterable

from . import config, metrics
from .errors import (
    EncodeError,
    NoVideoLoadedError,
    NotFoundError,
    StagingError,
    TranscoderError,
    sanitize_message,
)
from .filtergraph import CompiledFilterGraph, compile_filtergraph
from .models import Cue
from .settings import settings
from .transcoder import Transcoder, parse_progress

logger = logging.getLogger(__name__)


class RenderState(StrEnum):
    IDLE = "idle"
    STAGING = "staging"
    COMPILING = "compiling"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


IN_FLIGHT = frozenset({RenderState.STAGING, RenderState.COMPILING, RenderState.ENCODING})


@dataclass(frozen=True)
class RenderArtifact:
    name: str
    data: bytes
    mime_type: str = config.OUTPUT_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, path: Path) -> Path:
        destination = path.expanduser().resolve()
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.data)
        return destination


def build_encode_args(graph: CompiledFilterGraph) -> list[str]:
    """ffmpeg arguments; the filter stage is left out for an empty graph."""
    args = ["-i", config.INPUT_NAME]
    if not graph.is_empty:
        args += ["-vf", graph.expression]
    args += ["-c:a", "copy", config.OUTPUT_NAME]
    return args


class RenderOrchestrator:
    """
    Drives one render at a time through
    Idle -> Staging -> Compiling -> Encoding -> Done | Failed.

    ``start_render`` is called from the editor's single thread. It captures
    the cue snapshot and enters Staging before handing the pipeline to a
    worker, so a second call while a render is in flight sees the flag and
    does nothing.
    """

    def __init__(
        self,
        transcoder: Transcoder,
        *,
        font_path: Path | None = None,
        executor: ThreadPoolExecutor | None = None,
        on_state_change: Callable[[RenderState], None] | None = None,
        on_failure: Callable[[str], None] | None = None,
        on_progress: Callable[[float], None] | None = None,
    ) -> None:
        self.transcoder = transcoder
        self.font_path = Path(font_path) if font_path else settings.font_path
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="render")
        self.on_state_change = on_state_change
        self.on_failure = on_failure
        self.on_progress = on_progress
        self._state = RenderState.IDLE
        self.artifact: RenderArtifact | None = None
        self.failure: str | None = None
        self._total_duration = 0.0
        self.transcoder.on_log = self._handle_log

    def close(self) -> None:
        """Wait for a render in flight and release the worker thread we own."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "RenderOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state in IN_FLIGHT

    def _set_state(self, state: RenderState) -> None:
        logger.info("Render state: %s -> %s", self._state, state)
        self._state = state
        if self.on_state_change:
            self.on_state_change(state)

    def _handle_log(self, kind: str, message: str) -> None:
        logger.debug("transcoder %s: %s", kind, message)
        if self.on_progress:
            progress = parse_progress(message, self._total_duration)
            if progress is not None:
                self.on_progress(progress)

    def reset(self) -> None:
        """Forget the last result; ignored while a render is in flight."""
        if self.in_flight:
            return
        self.artifact = None
        self.failure = None
        if self._state != RenderState.IDLE:
            self._set_state(RenderState.IDLE)

    def start_render(
        self,
        source: bytes | None,
        cues: Iterable[Cue],
        *,
        total_duration: float = 0.0,
    ) -> Future | None:
        """
        Begin a render of ``source`` with a snapshot of ``cues``.

        Returns the Future of the render (its result is the artifact, or
        None on failure), or None when a render is already in flight.
        """
        if source is None:
            raise NoVideoLoadedError("Upload a video before rendering")
        if self.in_flight:
            logger.info("Render already in progress (%s); ignoring request", self._state)
            return None

        snapshot = tuple(cues)
        self.artifact = None
        self.failure = None
        self._total_duration = total_duration
        self._set_state(RenderState.STAGING)
        return self._executor.submit(self._run, source, snapshot)

    def render(
        self,
        source: bytes | None,
        cues: Iterable[Cue],
        *,
        total_duration: float = 0.0,
    ) -> RenderArtifact | None:
        """Blocking variant of ``start_render``."""
        future = self.start_render(source, cues, total_duration=total_duration)
        if future is None:
            return None
        return future.result()

    def _run(self, source: bytes, cues: tuple[Cue, ...]) -> RenderArtifact | None:
        run_metrics = metrics.RenderMetrics(
            cue_count=len(cues),
            input_bytes=len(source),
            duration_s=self._total_duration,
        )
        try:
            with run_metrics.step("staging"):
                self._stage(source)

            self._set_state(RenderState.COMPILING)
            with run_metrics.step("compile"):
                graph = compile_filtergraph(cues, self.font_path.name)
            run_metrics.filter_stage = not graph.is_empty
            if graph.is_empty:
                logger.info("No visible cues; encoding without an overlay stage")

            self._set_state(RenderState.ENCODING)
            with run_metrics.step("encode"):
                self.transcoder.run(build_encode_args(graph))
                try:
                    data = self.transcoder.read(config.OUTPUT_NAME)
                except NotFoundError as exc:
                    raise EncodeError(f"Output missing after encode: {exc}") from exc

            self.artifact = RenderArtifact(name=config.OUTPUT_NAME, data=data)
            run_metrics.output_bytes = self.artifact.size
            self._set_state(RenderState.DONE)
            return self.artifact
        except Exception as exc:
            run_metrics.error = str(exc)
            self._fail(exc)
            return None
        finally:
            run_metrics.finish()
            metrics.log_render_metrics(run_metrics)

    def _stage(self, source: bytes) -> None:
        try:
            font_bytes = self.font_path.read_bytes()
        except OSError as exc:
            raise StagingError(f"Font resource unreadable: {exc}") from exc
        self.transcoder.stage(config.INPUT_NAME, source)
        self.transcoder.stage(self.font_path.name, font_bytes)

    def _fail(self, exc: Exception) -> None:
        if isinstance(exc, TranscoderError):
            diagnostic = getattr(exc, "diagnostic", "")
            logger.error(
                "Render failed during %s: %s",
                self._state,
                exc,
                extra={"data": {"diagnostic": diagnostic[-2000:]}} if diagnostic else None,
            )
        else:
            logger.exception("Unexpected error during %s", self._state)
        self.failure = sanitize_message(f"Video processing failed: {exc}")
        self.artifact = None
        self._set_state(RenderState.FAILED)
        if self.on_failure:
            self.on_failure(self.failure)
