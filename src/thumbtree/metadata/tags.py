"""Tag capability sets read from EXIF and XMP blocks.

A :class:`TagSet` is the set of tag names an image actually advertises, together
with their raw values. Field extraction asks the set whether a name is present
before reading it, so a missing or malformed block only removes names from the
set instead of failing the whole read.

Tag names follow the exiv2 ``Family.Group.Name`` convention.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image

LOGGER = logging.getLogger(__name__)

ORIENTATION = "Exif.Image.Orientation"
CAMERA_MODEL = "Exif.Image.Model"
EXPOSURE_TIME = "Exif.Photo.ExposureTime"
FNUMBER = "Exif.Photo.FNumber"
ISO_SPEED = "Exif.Photo.ISOSpeedRatings"
LENS_MODEL = "Exif.Photo.LensModel"
RATING = "Xmp.xmp.Rating"
TAGS_LIST = "Xmp.digiKam.TagsList"
PICK_LABEL = "Xmp.digiKam.PickLabel"
COLOR_LABEL = "Xmp.digiKam.ColorLabel"

_IFD0_TAGS = {
    ExifTags.Base.Orientation: ORIENTATION,
    ExifTags.Base.Model: CAMERA_MODEL,
}
_EXIF_IFD_TAGS = {
    ExifTags.Base.ExposureTime: EXPOSURE_TIME,
    ExifTags.Base.FNumber: FNUMBER,
    ExifTags.Base.ISOSpeedRatings: ISO_SPEED,
    ExifTags.Base.LensModel: LENS_MODEL,
}
# Pillow strips XMP namespaces, so properties are matched on their local name.
_XMP_TAGS = {
    "Rating": RATING,
    "TagsList": TAGS_LIST,
    "PickLabel": PICK_LABEL,
    "ColorLabel": COLOR_LABEL,
}


class TagSet(Mapping[str, Any]):
    """Immutable mapping of advertised tag names to raw tag values."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = dict(values or {})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TagSet({sorted(self._values)!r})"

    def merged(self, other: Mapping[str, Any]) -> "TagSet":
        """Return a new set containing tags from both sets; ``self`` wins on clashes."""
        combined = dict(other)
        combined.update(self._values)
        return TagSet(combined)


def read_tags(path: Path) -> TagSet:
    """Return the EXIF and XMP tags advertised by the image at ``path``.

    Never raises for damaged metadata; unreadable blocks are logged and omitted.
    An unreadable file yields an empty set.
    """
    try:
        with Image.open(path) as image:
            exif_values = _read_exif(image, path)
            xmp_values = _read_xmp(image, path)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        LOGGER.warning("image '%s' has no readable metadata: %s", path, exc)
        return TagSet()
    return TagSet(exif_values).merged(xmp_values)


def _read_exif(image: Image.Image, path: Path) -> dict[str, Any]:
    values: dict[str, Any] = {}
    try:
        exif = image.getexif()
    except Exception as exc:  # pragma: no cover - Pillow raises assorted parse errors
        LOGGER.warning("unreadable EXIF block in '%s': %s", path, exc)
        return values

    for tag_id, name in _IFD0_TAGS.items():
        if tag_id in exif:
            values[name] = exif[tag_id]

    try:
        exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    except Exception as exc:  # pragma: no cover - Pillow raises assorted parse errors
        LOGGER.warning("unreadable EXIF sub-IFD in '%s': %s", path, exc)
        return values

    for tag_id, name in _EXIF_IFD_TAGS.items():
        if tag_id in exif_ifd:
            values[name] = exif_ifd[tag_id]
    return values


def _read_xmp(image: Image.Image, path: Path) -> dict[str, Any]:
    getxmp = getattr(image, "getxmp", None)
    if getxmp is None:
        return {}
    try:
        packet = getxmp()
    except Exception as exc:  # pragma: no cover - malformed XML
        LOGGER.warning("unreadable XMP block in '%s': %s", path, exc)
        return {}
    return tags_from_xmp(packet)


def tags_from_xmp(packet: Mapping[str, Any]) -> dict[str, Any]:
    """Map a Pillow ``getxmp()`` tree onto exiv2-style XMP tag names.

    Args:
        packet: Nested dictionary as returned by ``Image.getxmp``.

    Returns:
        dict[str, Any]: Recognised XMP properties keyed by tag name. The tag list is
        normalised to a list of strings; other values are returned as found.
    """
    values: dict[str, Any] = {}
    for description in _descriptions(packet):
        for local_name, tag_name in _XMP_TAGS.items():
            if tag_name in values or local_name not in description:
                continue
            raw = description[local_name]
            if tag_name == TAGS_LIST:
                values[tag_name] = _container_items(raw)
            else:
                values[tag_name] = _text(raw)
    return values


def _descriptions(packet: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    meta = packet.get("xmpmeta") if isinstance(packet, Mapping) else None
    rdf = meta.get("RDF") if isinstance(meta, Mapping) else None
    description = rdf.get("Description") if isinstance(rdf, Mapping) else None
    if isinstance(description, Mapping):
        return [description]
    if isinstance(description, list):
        return [item for item in description if isinstance(item, Mapping)]
    return []


def _container_items(raw: Any) -> list[str]:
    if isinstance(raw, Mapping):
        for container in ("Seq", "Bag", "Alt"):
            if container in raw:
                return _container_items(raw[container])
        if "li" in raw:
            items = raw["li"]
            if not isinstance(items, list):
                items = [items]
            return [text for text in (_text(item) for item in items) if text]
        text = _text(raw)
        return [text] if text else []
    if isinstance(raw, list):
        return [text for text in (_text(item) for item in raw) if text]
    text = _text(raw)
    return [text] if text else []


def _text(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return raw.get("text")
    return raw


__all__ = [
    "TagSet",
    "read_tags",
    "tags_from_xmp",
    "ORIENTATION",
    "CAMERA_MODEL",
    "EXPOSURE_TIME",
    "FNUMBER",
    "ISO_SPEED",
    "LENS_MODEL",
    "RATING",
    "TAGS_LIST",
    "PICK_LABEL",
    "COLOR_LABEL",
]
