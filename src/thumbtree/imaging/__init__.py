"""Decoding, orientation, and thumbnail rendering."""

from .codec import decode, encode, read_dimensions
from .errors import RenderError
from .loader import load_canonical
from .renderer import RenditionFanOut, ThumbnailRenderer, thumbnail_dimensions, thumbnail_path

__all__ = [
    "RenderError",
    "decode",
    "encode",
    "read_dimensions",
    "load_canonical",
    "ThumbnailRenderer",
    "RenditionFanOut",
    "thumbnail_dimensions",
    "thumbnail_path",
]
