"""Imaging errors."""


class RenderError(Exception):
    """Raised when a source image cannot be decoded or a thumbnail cannot be written."""
