"""Photo metadata extraction and record models."""

from .extractor import MetadataExtractor, build_record
from .models import ColorLabel, MetadataRecord, PickLabel, orientation_name
from .tags import TagSet, read_tags

__all__ = [
    "MetadataExtractor",
    "build_record",
    "MetadataRecord",
    "PickLabel",
    "ColorLabel",
    "orientation_name",
    "TagSet",
    "read_tags",
]
