"""Shared fixtures for thumbtree tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

MakeJpeg = Callable[..., Path]


def write_jpeg(
    path: Path,
    size: tuple[int, int],
    *,
    orientation: int | None = None,
    model: str | None = None,
    color: str = "red",
) -> Path:
    """Write a solid-color JPEG, optionally with EXIF orientation and camera model."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGB", size, color=color)
    exif = Image.Exif()
    if orientation is not None:
        exif[0x0112] = orientation
    if model is not None:
        exif[0x0110] = model
    image.save(path, format="JPEG", quality=90, exif=exif.tobytes())
    return path


@pytest.fixture
def make_jpeg() -> MakeJpeg:
    """Return the JPEG writer helper."""
    return write_jpeg


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory so no user configuration leaks in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("THUMBTREE__"):
            monkeypatch.delenv(key)
    return home
