"""Thumbnail rendering and per-file fan-out."""

from __future__ import annotations

import logging
import math
from concurrent.futures import Executor, Future, as_completed
from pathlib import Path
from typing import Callable, Optional, Sequence

from PIL import Image

from .codec import encode
from .errors import RenderError

LOGGER = logging.getLogger(__name__)

THUMBNAIL_EXTENSION = "jpg"


def thumbnail_dimensions(width: int, height: int, size: int) -> tuple[int, int]:
    """Return the output size for a long edge of ``size``, preserving aspect ratio.

    Examples:
        >>> thumbnail_dimensions(4000, 3000, 800)
        (800, 600)
        >>> thumbnail_dimensions(3000, 4000, 800)
        (600, 800)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid source dimensions {width}x{height}")
    aspect = width / height
    if width > height:
        return size, max(1, math.floor(size / aspect + 0.5))
    if height > width:
        return max(1, math.floor(size * aspect + 0.5)), size
    return size, size


def thumbnail_path(output_path: Path, dimensions: tuple[int, int]) -> Path:
    """Return the thumbnail file for the mirrored source path ``output_path``."""
    width, height = dimensions
    return output_path.with_name(f"{output_path.name}_{width}x{height}.{THUMBNAIL_EXTENSION}")


class ThumbnailRenderer:
    """Resize a canonical image and encode it next to the mirrored source path."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.BICUBIC) -> None:
        self.resample = resample

    def render(
        self,
        image: Image.Image,
        size: int,
        quality: int,
        output_path: Path,
    ) -> tuple[int, int]:
        """Write one thumbnail and return its actual dimensions.

        Args:
            image: Canonical (upright) image; it is never modified.
            size: Target long edge in pixels.
            quality: JPEG quality.
            output_path: Mirrored path of the source image in the output tree.

        Returns:
            tuple[int, int]: Width and height of the written thumbnail.

        Raises:
            RenderError: If resizing or encoding fails.
        """
        dimensions = thumbnail_dimensions(image.width, image.height, size)
        try:
            thumbnail = image.resize(dimensions, self.resample)
        except (OSError, ValueError, MemoryError) as exc:
            raise RenderError(f"cannot resize {output_path.name} to {dimensions}: {exc}") from exc
        encode(thumbnail, thumbnail_path(output_path, dimensions), quality)
        return dimensions


class RenditionFanOut:
    """Render every configured size of one image concurrently on a shared pool.

    The executor is owned by the caller and shared by all files of a run, which
    bounds the number of renders in flight regardless of how many sizes are
    configured.
    """

    def __init__(self, renderer: ThumbnailRenderer, executor: Executor) -> None:
        self._renderer = renderer
        self._executor = executor

    def render_all(
        self,
        image: Image.Image,
        renditions: Sequence[tuple[int, int]],
        output_path: Path,
        on_complete: Optional[Callable[[int], None]] = None,
    ) -> list[tuple[int, int]]:
        """Render ``renditions`` and return their dimensions in configured order.

        Waits for every dispatched render, even after a failure, so no task is
        still writing once this returns.

        Args:
            image: Canonical image shared read-only by all renders.
            renditions: ``(size, quality)`` pairs.
            output_path: Mirrored path of the source image in the output tree.
            on_complete: Called with the number of finished renders after each one
                completes, in completion order.

        Returns:
            list[tuple[int, int]]: Dimensions, index-aligned with ``renditions``.

        Raises:
            RenderError: If any render fails; the first failure is re-raised.
        """
        futures: dict[Future[tuple[int, int]], int] = {
            self._executor.submit(self._renderer.render, image, size, quality, output_path): index
            for index, (size, quality) in enumerate(renditions)
        }
        results: list[Optional[tuple[int, int]]] = [None] * len(futures)
        failures: list[RenderError] = []

        for completed, future in enumerate(as_completed(futures), start=1):
            index = futures[future]
            try:
                results[index] = future.result()
            except RenderError as exc:
                failures.append(exc)
            except Exception as exc:  # pragma: no cover - unexpected codec fault
                failures.append(RenderError(f"unexpected failure rendering {output_path}: {exc}"))
            if on_complete is not None:
                on_complete(completed)

        if failures:
            for extra in failures[1:]:
                LOGGER.debug("additional render failure: %s", extra)
            raise failures[0]
        return [dimensions for dimensions in results if dimensions is not None]


__all__ = [
    "THUMBNAIL_EXTENSION",
    "thumbnail_dimensions",
    "thumbnail_path",
    "ThumbnailRenderer",
    "RenditionFanOut",
]
