import subprocess
from pathlib import Path
from typing import List, Optional

import typer

from .editor import EditorSession
from .errors import InvalidCueError
from .filtergraph import compile_filtergraph
from .logging import setup_logging
from .models import Cue, Position
from .preview import resolve_visible
from .render import RenderOrchestrator, RenderState
from .settings import settings
from .transcoder import FFmpegTranscoder, probe_media

app = typer.Typer(help="Attach timed text overlays to a video and burn them in with ffmpeg.")

CUE_HELP = "Cue as START,END,TEXT in seconds (repeatable), e.g. --cue '1,3,Hello'."


@app.callback()
def _configure(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default from settings)."),
) -> None:
    setup_logging(log_level or settings.log_level)


def parse_cue(
    value: str,
    *,
    font_size: int,
    color: str,
    position: Position,
) -> Cue:
    parts = value.split(",", 2)
    if len(parts) != 3:
        raise typer.BadParameter(f"Expected START,END,TEXT but got {value!r}", param_hint="--cue")
    start, end, text = parts
    try:
        return Cue.build(
            text=text,
            start_time=float(start),
            end_time=float(end),
            font_size=font_size,
            font_color=color,
            position=position,
        )
    except (ValueError, InvalidCueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--cue") from exc


def _parse_cues(values: Optional[List[str]], font_size: int, color: str, position: Position) -> list[Cue]:
    return [
        parse_cue(value, font_size=font_size, color=color, position=position)
        for value in values or []
    ]


FONT_SIZE_OPTION = typer.Option(24, "--font-size", min=1, help="Font size in points for every cue.")
COLOR_OPTION = typer.Option("#FFFFFF", "--color", help="Font colour as #RRGGBB.")
POSITION_OPTION = typer.Option(Position.MIDDLE, "--position", help="Vertical anchor for every cue.")


@app.command("render")
def render(
    input_video: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to the source video file.",
    ),
    output_video: Path = typer.Option(
        ...,
        "--output",
        "-o",
        dir_okay=False,
        help="Path where the rendered video will be written.",
    ),
    cues: Optional[List[str]] = typer.Option(None, "--cue", "-c", help=CUE_HELP),
    font_size: int = FONT_SIZE_OPTION,
    color: str = COLOR_OPTION,
    position: Position = POSITION_OPTION,
    font: Path = typer.Option(
        None,
        "--font",
        exists=True,
        dir_okay=False,
        help="TrueType font to draw with (default from settings).",
    ),
) -> None:
    """Burn the given cues into a copy of INPUT_VIDEO."""
    parsed = _parse_cues(cues, font_size, color, position)
    if font is None and not settings.font_path.is_file():
        raise typer.BadParameter(
            f"Default font {settings.font_path.name} is not installed; pass a font file.",
            param_hint="--font",
        )

    with FFmpegTranscoder() as transcoder, RenderOrchestrator(transcoder, font_path=font) as orchestrator:
        session = EditorSession(orchestrator)
        session.upload_video(input_video.read_bytes())
        try:
            duration = probe_media(input_video)
        except (OSError, ValueError, subprocess.CalledProcessError):
            duration = None
        if duration:
            session.clock.on_duration_resolved(duration)

        for cue in parsed:
            session.add_cue(cue)

        future = session.start_render()
        if future is not None:
            future.result()

        if session.render_state != RenderState.DONE or session.artifact is None:
            typer.echo(session.failure or "Video processing failed.", err=True)
            raise typer.Exit(code=1)

        saved = session.artifact.save(output_video)
    typer.echo(f"Rendered video saved to: {saved}")


@app.command("filtergraph")
def filtergraph(
    cues: Optional[List[str]] = typer.Option(None, "--cue", "-c", help=CUE_HELP),
    font_size: int = FONT_SIZE_OPTION,
    color: str = COLOR_OPTION,
    position: Position = POSITION_OPTION,
) -> None:
    """Print the ffmpeg filter expression the cues compile to."""
    graph = compile_filtergraph(_parse_cues(cues, font_size, color, position), settings.font_path.name)
    if graph.is_empty:
        typer.echo("(no overlay stage)")
        return
    typer.echo(graph.expression)


@app.command("preview")
def preview(
    at: float = typer.Option(..., "--at", help="Playback time in seconds."),
    cues: Optional[List[str]] = typer.Option(None, "--cue", "-c", help=CUE_HELP),
    font_size: int = FONT_SIZE_OPTION,
    color: str = COLOR_OPTION,
    position: Position = POSITION_OPTION,
) -> None:
    """List the cues visible at a playback time and where they sit."""
    visible = resolve_visible(_parse_cues(cues, font_size, color, position), at)
    if not visible:
        typer.echo(f"No cues visible at {at:g}s")
        return
    for item in visible:
        typer.echo(f"{item.cue.label()} @ bottom {item.anchor.bottom_pct:g}%")


def main() -> None:
    """Entry point for `python -m subtitle_studio.cli`."""
    app()


if __name__ == "__main__":
    main()
