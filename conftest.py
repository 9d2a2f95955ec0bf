"""
Test configuration to keep imports stable.

Pytest prepends each test directory to ``sys.path``. We explicitly place the
``src`` directory at the front so imports resolve to the checked-in source
rather than a previously installed copy of the package.
"""
from __future__ import annotations

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parent / "src"
src_str = str(SRC_ROOT)

if src_str in sys.path:
    sys.path.remove(src_str)
sys.path.insert(0, src_str)
