import pytest
from pydantic import ValidationError

from subtitle_studio.errors import InvalidCueError
from subtitle_studio.models import Cue, Position


def test_blank_cue_matches_reset_defaults() -> None:
    cue = Cue.blank()

    assert cue.text == ""
    assert cue.start_time == 0
    assert cue.end_time == 0
    assert cue.font_size == 24
    assert cue.font_color == "#FFFFFF"
    assert cue.position is Position.MIDDLE
    assert cue.is_blank


def test_whitespace_text_counts_as_blank() -> None:
    assert Cue(text="   \t").is_blank
    assert not Cue(text=" hi ").is_blank


@pytest.mark.parametrize(
    "fields",
    [
        {"start_time": -1.0},
        {"start_time": 3.0, "end_time": 1.0},
        {"font_size": 0},
        {"font_color": "FFFFFF"},
        {"font_color": "#FFF"},
        {"font_color": "#GG0000"},
        {"position": "left"},
    ],
)
def test_build_rejects_invalid_fields(fields) -> None:
    with pytest.raises(InvalidCueError):
        Cue.build(text="x", **fields)


def test_cue_is_immutable() -> None:
    cue = Cue(text="Hi")

    with pytest.raises(ValidationError):
        cue.text = "changed"


def test_replace_validates_merged_fields() -> None:
    cue = Cue(text="Hi", start_time=1, end_time=3)

    assert cue.replace(text="Bye").text == "Bye"
    with pytest.raises(InvalidCueError):
        cue.replace(end_time=0.5)


def test_is_active_is_inclusive_on_both_ends() -> None:
    cue = Cue(text="Hi", start_time=1, end_time=3)

    assert cue.is_active(1)
    assert cue.is_active(3)
    assert not cue.is_active(0.9999)
    assert not cue.is_active(3.0001)


def test_exceeds_only_with_known_duration() -> None:
    cue = Cue(text="Hi", start_time=8, end_time=12)

    assert not cue.exceeds(0)
    assert cue.exceeds(10)
    assert not cue.exceeds(12)


def test_label_formats_times_to_one_decimal() -> None:
    assert Cue(text="Hi", start_time=1, end_time=3.25).label() == "[1.0s ~ 3.2s] Hi"
