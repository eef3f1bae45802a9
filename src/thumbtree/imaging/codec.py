"""JPEG codec adapter backed by Pillow."""

from __future__ import annotations

import os
from pathlib import Path

from PIL import Image

from .errors import RenderError

# Pillow's decode failures surface as any of these.
_CODEC_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def read_dimensions(path: Path) -> tuple[int, int]:
    """Return ``(width, height)`` of the stored pixel buffer without decoding it."""
    try:
        with Image.open(path) as image:
            return image.size
    except _CODEC_ERRORS as exc:
        raise RenderError(f"cannot read image header of {path}: {exc}") from exc


def decode(path: Path) -> Image.Image:
    """Decode ``path`` fully into memory and return the image.

    The returned image keeps its ``info`` (including the raw EXIF block) but no
    longer holds the file open.
    """
    try:
        with Image.open(path) as image:
            image.load()
            return image
    except _CODEC_ERRORS as exc:
        raise RenderError(f"cannot decode {path}: {exc}") from exc


def encode(image: Image.Image, path: Path, quality: int) -> None:
    """Write ``image`` to ``path`` as a baseline RGB JPEG at ``quality``.

    The file is written under a temporary name first so readers never observe a
    truncated thumbnail.
    """
    partial = path.with_name(f".{path.name}.partial")
    try:
        rgb = image if image.mode == "RGB" else image.convert("RGB")
        rgb.save(partial, format="JPEG", quality=quality)
        os.replace(partial, path)
    except _CODEC_ERRORS as exc:
        partial.unlink(missing_ok=True)
        raise RenderError(f"cannot encode {path}: {exc}") from exc


__all__ = ["read_dimensions", "decode", "encode"]
