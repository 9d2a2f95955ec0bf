import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fakes import FakeTranscoder
from subtitle_studio import cli
from subtitle_studio.cli import app


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


class ContextTranscoder(FakeTranscoder):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


def test_render_command_writes_output(monkeypatch, tmp_path: Path, font_file: Path) -> None:
    engine = ContextTranscoder()
    monkeypatch.setattr(cli, "FFmpegTranscoder", lambda: engine)
    monkeypatch.setattr(cli, "probe_media", lambda path: 10.0)

    input_file = tmp_path / "input.mp4"
    input_file.write_bytes(b"dummy video content")
    output_file = tmp_path / "out.mp4"

    result = CliRunner().invoke(
        app,
        [
            "render",
            str(input_file),
            "--output",
            str(output_file),
            "--cue",
            "1,3,Hello: world",
            "--cue",
            "2,4,Second",
            "--position",
            "bottom",
            "--font",
            str(font_file),
        ],
    )

    assert result.exit_code == 0, result.output
    assert output_file.read_bytes() == b"rendered-video"
    assert "Rendered video saved to" in result.stdout
    assert engine.files["input.mp4"] == b"dummy video content"
    expression = engine.runs[0][engine.runs[0].index("-vf") + 1]
    assert "text='Hello\\: world'" in expression
    assert "y=h-text_h" in expression


def test_render_command_reports_failure(monkeypatch, tmp_path: Path, font_file: Path) -> None:
    engine = ContextTranscoder(fail_run=True)
    monkeypatch.setattr(cli, "FFmpegTranscoder", lambda: engine)
    monkeypatch.setattr(cli, "probe_media", lambda path: None)

    input_file = tmp_path / "input.mp4"
    input_file.write_bytes(b"video")
    output_file = tmp_path / "out.mp4"

    result = CliRunner().invoke(
        app,
        ["render", str(input_file), "-o", str(output_file), "--font", str(font_file)],
    )

    assert result.exit_code == 1
    assert not output_file.exists()
    assert "Video processing failed" in result.output


def test_render_command_survives_garbled_duration_output(monkeypatch, tmp_path: Path, font_file: Path) -> None:
    engine = ContextTranscoder()
    monkeypatch.setattr(cli, "FFmpegTranscoder", lambda: engine)

    def garbled(path):
        raise json.JSONDecodeError("Expecting value", "not json", 0)

    monkeypatch.setattr(cli, "probe_media", garbled)

    input_file = tmp_path / "input.mp4"
    input_file.write_bytes(b"video")
    output_file = tmp_path / "out.mp4"

    result = CliRunner().invoke(
        app,
        ["render", str(input_file), "-o", str(output_file), "-c", "0,1,Hi", "--font", str(font_file)],
    )

    assert result.exit_code == 0, result.output
    assert output_file.read_bytes() == b"rendered-video"


def test_render_command_requires_font_when_default_is_missing(monkeypatch, tmp_path: Path) -> None:
    engine = ContextTranscoder()
    monkeypatch.setattr(cli, "FFmpegTranscoder", lambda: engine)
    monkeypatch.setattr(cli, "probe_media", lambda path: None)
    monkeypatch.setattr(cli.settings, "font_path", tmp_path / "fonts" / "Missing.ttf")

    input_file = tmp_path / "input.mp4"
    input_file.write_bytes(b"video")

    result = CliRunner().invoke(app, ["render", str(input_file), "-o", str(tmp_path / "out.mp4")])

    assert result.exit_code != 0
    assert "--font" in result.output
    assert engine.runs == []


def test_render_command_shuts_down_render_worker(monkeypatch, tmp_path: Path, font_file: Path) -> None:
    closed = []
    engine = ContextTranscoder()
    monkeypatch.setattr(cli, "FFmpegTranscoder", lambda: engine)
    monkeypatch.setattr(cli, "probe_media", lambda path: None)
    original_close = cli.RenderOrchestrator.close

    def tracking_close(self):
        closed.append(self)
        original_close(self)

    monkeypatch.setattr(cli.RenderOrchestrator, "close", tracking_close)

    input_file = tmp_path / "input.mp4"
    input_file.write_bytes(b"video")

    result = CliRunner().invoke(
        app,
        ["render", str(input_file), "-o", str(tmp_path / "out.mp4"), "--font", str(font_file)],
    )

    assert result.exit_code == 0, result.output
    assert len(closed) == 1


def test_filtergraph_command_prints_expression() -> None:
    result = CliRunner().invoke(app, ["filtergraph", "--cue", "0,1.5,it's", "--color", "#00FF00"])

    assert result.exit_code == 0
    assert "text='it\\'s'" in result.stdout
    assert "fontcolor=0x00FF00" in result.stdout
    assert "between(t,0,1.5)" in result.stdout


def test_filtergraph_command_without_cues() -> None:
    result = CliRunner().invoke(app, ["filtergraph"])

    assert result.exit_code == 0
    assert "(no overlay stage)" in result.stdout


def test_preview_command_lists_visible_cues() -> None:
    result = CliRunner().invoke(
        app,
        ["preview", "--at", "2", "--cue", "1,3,Hi", "--cue", "5,6,Later", "--position", "top"],
    )

    assert result.exit_code == 0
    assert "[1.0s ~ 3.0s] Hi @ bottom 80%" in result.stdout
    assert "Later" not in result.stdout


def test_malformed_cue_option_is_rejected() -> None:
    result = CliRunner().invoke(app, ["preview", "--at", "1", "--cue", "oops"])

    assert result.exit_code != 0


def test_cue_with_end_before_start_is_rejected() -> None:
    result = CliRunner().invoke(app, ["filtergraph", "--cue", "3,1,backwards"])

    assert result.exit_code != 0
