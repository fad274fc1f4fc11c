from __future__ import annotations

import io
import logging
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def reset_formdoc_handlers():
    """Drop handlers the CLI installs so each test starts with a clean root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for h in list(root.handlers):
        if getattr(h, "name", "") in ("formdoc_json", "formdoc_file"):
            h.close()
            root.removeHandler(h)


@pytest.fixture
def make_png():
    from PIL import Image

    def _make(width: int, height: int, color=(0, 0, 0, 255), mode: str = "RGBA") -> bytes:
        buffer = io.BytesIO()
        with Image.new(mode, (width, height), color) as img:
            img.save(buffer, format="PNG")
        return buffer.getvalue()

    return _make
