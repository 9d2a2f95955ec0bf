from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeTranscoder


@pytest.fixture
def font_file(tmp_path: Path) -> Path:
    path = tmp_path / "Studio.ttf"
    path.write_bytes(b"font-bytes")
    return path


@pytest.fixture
def transcoder() -> FakeTranscoder:
    return FakeTranscoder()
