"""Manifest data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Tuple

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from thumbtree.metadata.models import MetadataRecord


class ImageEntry(BaseModel):
    """Last-known state of one source image.

    Attributes:
        filename: Path of the source relative to the collection root, ``/``-separated.
        sha1sum: Hex SHA-1 of the full source file at regeneration time.
        modified_time: Source modification time observed at regeneration time.
        metadata: Extracted metadata record.
        thumbnail_sizes: ``[width, height]`` per configured size, in configured order.
    """

    filename: str
    sha1sum: str
    modified_time: datetime
    metadata: MetadataRecord = Field(default_factory=MetadataRecord)
    thumbnail_sizes: List[Tuple[int, int]] = Field(default_factory=list)

    @field_validator("modified_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


ManifestEntries = TypeAdapter(List[ImageEntry])


__all__ = ["ImageEntry", "ManifestEntries"]
