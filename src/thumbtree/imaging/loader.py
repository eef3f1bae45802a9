"""Orientation-normalizing image loader."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps

from .codec import decode
from .errors import RenderError

LOGGER = logging.getLogger(__name__)


def load_canonical(path: Path) -> Image.Image:
    """Decode ``path`` and apply its EXIF orientation.

    The result is upright, in RGB, and independent of the source file. It is
    treated as read-only by every renderer that receives it.

    Raises:
        RenderError: If the image cannot be decoded or transposed.
    """
    image = decode(path)
    try:
        upright = ImageOps.exif_transpose(image)
    except (OSError, ValueError, SyntaxError) as exc:
        # Broken orientation data must not hide an otherwise decodable image.
        LOGGER.warning("ignoring unreadable orientation of '%s': %s", path, exc)
        upright = image
    try:
        return upright.convert("RGB")
    except (OSError, ValueError) as exc:
        raise RenderError(f"cannot convert {path} to RGB: {exc}") from exc


__all__ = ["load_canonical"]
