"""Metadata record models serialized into manifests."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

Rational = Tuple[int, int]
Dimensions = Tuple[int, int]

ORIENTATION_NAMES: dict[int, str] = {
    0: "rotation: unspecified",
    1: "rotation: normal",
    2: "rotation: horizontal flip",
    3: "rotation: rotate 180",
    4: "rotation: vertical flip",
    5: "rotation: rotate 90 horizontal flip",
    6: "rotation: rotate 90",
    7: "rotation: rotate 90 vertical flip",
    8: "rotation: rotate 270",
}
UNSPECIFIED_ORIENTATION = ORIENTATION_NAMES[0]


class PickLabel(str, Enum):
    """digiKam pick label stored in XMP as a small integer code."""

    NONE = "none"
    REJECTED = "rejected"
    PENDING = "pending"
    ACCEPTED = "accepted"


class ColorLabel(str, Enum):
    """digiKam color label stored in XMP as a small integer code."""

    NONE = "none"
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    MAGENTA = "magenta"
    GRAY = "gray"
    BLACK = "black"
    WHITE = "white"


PICK_LABEL_CODES: dict[int, PickLabel] = {
    0: PickLabel.NONE,
    1: PickLabel.REJECTED,
    2: PickLabel.PENDING,
    3: PickLabel.ACCEPTED,
}
COLOR_LABEL_CODES: dict[int, ColorLabel] = {
    0: ColorLabel.NONE,
    1: ColorLabel.RED,
    2: ColorLabel.ORANGE,
    3: ColorLabel.YELLOW,
    4: ColorLabel.GREEN,
    5: ColorLabel.BLUE,
    6: ColorLabel.MAGENTA,
    7: ColorLabel.GRAY,
    8: ColorLabel.BLACK,
    9: ColorLabel.WHITE,
}


def orientation_name(code: Optional[int]) -> str:
    """Return the textual form of an EXIF orientation code."""
    if code is None:
        return UNSPECIFIED_ORIENTATION
    return ORIENTATION_NAMES.get(code, UNSPECIFIED_ORIENTATION)


class MetadataRecord(BaseModel):
    """Best-effort photo metadata; every field is independently optional.

    Attributes:
        size: Width and height of the stored pixel buffer (before orientation).
        orientation: Textual EXIF orientation, one of ``ORIENTATION_NAMES``.
        exposure_time: Exposure time as an exact ``[numerator, denominator]`` pair.
        iso_speed: ISO speed rating.
        fnumber: Aperture as an exact ``[numerator, denominator]`` pair.
        lens_model: Lens model string.
        camera_model: Camera model string.
        rating: Star rating from XMP.
        tags: digiKam hierarchical tag list.
        digikam_pick_label: Pick label, when present and recognised.
        digikam_color_label: Color label, when present and recognised.
    """

    size: Optional[Dimensions] = None
    orientation: str = UNSPECIFIED_ORIENTATION
    exposure_time: Optional[Rational] = None
    iso_speed: Optional[int] = None
    fnumber: Optional[Rational] = None
    lens_model: Optional[str] = None
    camera_model: Optional[str] = None
    rating: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    digikam_pick_label: Optional[PickLabel] = None
    digikam_color_label: Optional[ColorLabel] = None

    @field_validator("orientation")
    @classmethod
    def _known_orientation(cls, value: str) -> str:
        if value not in ORIENTATION_NAMES.values():
            raise ValueError(f"unknown orientation {value!r}")
        return value


__all__ = [
    "Rational",
    "Dimensions",
    "ORIENTATION_NAMES",
    "UNSPECIFIED_ORIENTATION",
    "PickLabel",
    "ColorLabel",
    "PICK_LABEL_CODES",
    "COLOR_LABEL_CODES",
    "orientation_name",
    "MetadataRecord",
]
