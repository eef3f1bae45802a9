"""Lookup of prior manifest entries and the staleness rule."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from .models import ImageEntry

LOGGER = logging.getLogger(__name__)


def is_stale(entry: Optional[ImageEntry], modified_time: datetime) -> bool:
    """Return whether a source must be regenerated.

    A source is stale when it has no prior entry or when its current modification
    time is strictly later than the recorded one. Equal or earlier times keep the
    prior entry.
    """
    return entry is None or entry.modified_time < modified_time


class ManifestIndex:
    """Prior entries of one directory keyed by collection-relative path.

    Entries are claimed as the directory listing is processed; whatever is never
    claimed belongs to sources that are no longer present.
    """

    def __init__(self, entries: Iterable[ImageEntry] = ()) -> None:
        self._entries: dict[str, ImageEntry] = {}
        for entry in entries:
            if entry.filename in self._entries:
                LOGGER.debug("duplicate manifest entry for %s; keeping the first", entry.filename)
                continue
            self._entries[entry.filename] = entry
        self._claimed: set[str] = set()

    def claim(self, key: str) -> Optional[ImageEntry]:
        """Return the prior entry for ``key`` (if any) and mark it as seen."""
        self._claimed.add(key)
        return self._entries.get(key)

    def unclaimed(self) -> list[ImageEntry]:
        """Return entries never claimed, in their stored order."""
        return [entry for key, entry in self._entries.items() if key not in self._claimed]


__all__ = ["ManifestIndex", "is_stale"]
