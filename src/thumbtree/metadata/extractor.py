"""Best-effort metadata extraction for source photographs."""

from __future__ import annotations

import logging
from fractions import Fraction
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from thumbtree.imaging.codec import read_dimensions
from thumbtree.imaging.errors import RenderError

from . import tags as tag_names
from .models import (
    COLOR_LABEL_CODES,
    PICK_LABEL_CODES,
    ColorLabel,
    Dimensions,
    MetadataRecord,
    PickLabel,
    Rational,
    orientation_name,
)
from .tags import TagSet, read_tags

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Failures a single malformed tag value can produce while being coerced.
_FIELD_ERRORS = (TypeError, ValueError, AttributeError, IndexError, UnicodeDecodeError)


class MetadataExtractor:
    """Build :class:`MetadataRecord` values for image files."""

    def __init__(self, tag_reader: Callable[[Path], TagSet] = read_tags) -> None:
        self._tag_reader = tag_reader

    def extract(self, path: Path) -> MetadataRecord:
        """Return the metadata record for ``path``; never raises for bad metadata.

        Args:
            path: Image file to inspect.

        Returns:
            MetadataRecord: Record with every unavailable field left absent.
        """
        size: Optional[Dimensions]
        try:
            size = read_dimensions(path)
        except RenderError as exc:
            LOGGER.warning("could not read dimensions of '%s': %s", path, exc)
            size = None
        return build_record(self._tag_reader(path), size=size)


def build_record(tags: TagSet, *, size: Optional[Dimensions] = None) -> MetadataRecord:
    """Assemble a metadata record from a tag capability set.

    Each field is read only when its tag name is advertised by ``tags`` and a
    failure while coercing one value leaves only that field absent.
    """
    return MetadataRecord(
        size=size,
        orientation=orientation_name(_field(tags, tag_names.ORIENTATION, _as_int)),
        exposure_time=_field(tags, tag_names.EXPOSURE_TIME, _as_rational),
        iso_speed=_field(tags, tag_names.ISO_SPEED, _as_int),
        fnumber=_field(tags, tag_names.FNUMBER, _as_rational),
        lens_model=_field(tags, tag_names.LENS_MODEL, _as_string),
        camera_model=_field(tags, tag_names.CAMERA_MODEL, _as_string),
        rating=_rating(tags),
        tags=_field(tags, tag_names.TAGS_LIST, _as_strings) or [],
        digikam_pick_label=_field(tags, tag_names.PICK_LABEL, _as_pick_label),
        digikam_color_label=_field(tags, tag_names.COLOR_LABEL, _as_color_label),
    )


def _field(tags: TagSet, name: str, convert: Callable[[Any], Optional[T]]) -> Optional[T]:
    if name not in tags:
        return None
    try:
        return convert(tags[name])
    except _FIELD_ERRORS as exc:
        LOGGER.debug("ignoring unreadable tag %s: %s", name, exc)
        return None


def _rating(tags: TagSet) -> Optional[int]:
    raw = _field(tags, tag_names.RATING, _as_string)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        LOGGER.warning("expected an integer rating, got '%s': %s", raw, exc)
        return None


def _as_string(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if not isinstance(value, str):
        value = str(value)
    text = value.strip("\x00").strip()
    return text or None


def _as_strings(value: Any) -> list[str]:
    if isinstance(value, (str, bytes)):
        value = [value]
    return [text for text in (_as_string(item) for item in value) if text]


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, (tuple, list)):
        if not value:
            return None
        value = value[0]
    if isinstance(value, (str, bytes)):
        return int(_as_string(value) or "")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer value, got {value!r}")
    return int(value)


def _as_rational(value: Any) -> Optional[Rational]:
    """Return an exact ``(numerator, denominator)`` pair without float coercion."""
    if isinstance(value, (tuple, list)) and len(value) == 2:
        numerator, denominator = value
        return int(numerator), int(denominator)
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        return int(value.numerator), int(value.denominator)
    if isinstance(value, str):
        fraction = Fraction(value.strip())
        return fraction.numerator, fraction.denominator
    raise TypeError(f"expected a rational value, got {type(value).__name__}")


def _as_pick_label(value: Any) -> Optional[PickLabel]:
    return PICK_LABEL_CODES.get(_as_int(value))  # type: ignore[arg-type]


def _as_color_label(value: Any) -> Optional[ColorLabel]:
    return COLOR_LABEL_CODES.get(_as_int(value))  # type: ignore[arg-type]


__all__ = ["MetadataExtractor", "build_record"]
