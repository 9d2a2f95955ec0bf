"""Configuration constants for the subtitle studio."""

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Draft defaults (what a fresh or reset draft cue looks like)
DEFAULT_FONT_SIZE = 24
DEFAULT_FONT_COLOR = "#FFFFFF"
DEFAULT_POSITION = "middle"

# Offset added to the playback time when stamping a new cue's end time
DEFAULT_CUE_OFFSET_S = 1.0

# Names inside the transcoder's input space
INPUT_NAME = "input.mp4"
OUTPUT_NAME = "output.mp4"
OUTPUT_MIME_TYPE = "video/mp4"
DEFAULT_FONT_FILE = "CookieRunRegular.ttf"
DEFAULT_FONT_PATH = PROJECT_ROOT / "fonts" / DEFAULT_FONT_FILE

# drawtext background box
DEFAULT_BOX_COLOR = "black@0.5"
DEFAULT_BOX_BORDER_WIDTH = 5

# Preview overlay styling, mirrors the burned-in box
PREVIEW_BACKGROUND = "rgba(0, 0, 0, 0.5)"

# ffmpeg keeps this many stderr lines for failure diagnostics
MAX_DIAGNOSTIC_LINES = 200
