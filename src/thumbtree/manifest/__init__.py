"""Per-directory manifest persistence."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .errors import CorruptManifestError, ManifestError, MissingManifestError
from .index import ManifestIndex, is_stale
from .models import ImageEntry, ManifestEntries

LOGGER = logging.getLogger(__name__)

MANIFEST_PREFIX = "_"
MANIFEST_SUFFIX = ".json"


class ManifestStore:
    """Load and persist the sidecar manifest of one output directory."""

    def manifest_name(self, source_dir: Path) -> str:
        """Return the manifest file name for a source directory.

        Args:
            source_dir: Directory whose images the manifest describes.

        Returns:
            str: ``_<directory name>.json``.
        """
        return f"{MANIFEST_PREFIX}{source_dir.name}{MANIFEST_SUFFIX}"

    def manifest_path(self, source_dir: Path, output_dir: Path) -> Path:
        """Return where the manifest for ``source_dir`` lives inside ``output_dir``."""
        return output_dir / self.manifest_name(source_dir)

    def load(self, path: Path) -> list[ImageEntry]:
        """Load the entries stored at ``path``.

        Args:
            path: Manifest file.

        Returns:
            list[ImageEntry]: Entries in stored order.

        Raises:
            MissingManifestError: If no manifest file exists.
            CorruptManifestError: If the file cannot be read, parsed, or validated.
        """
        if not path.exists():
            raise MissingManifestError(f"No manifest found at {path}")

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorruptManifestError(f"Unreadable manifest {path}: {exc}") from exc

        try:
            return ManifestEntries.validate_json(raw)
        except ValidationError as exc:
            raise CorruptManifestError(f"Invalid manifest data in {path}: {exc}") from exc

    def load_or_empty(self, path: Path) -> list[ImageEntry]:
        """Load ``path``, treating an absent or corrupt manifest as empty."""
        try:
            return self.load(path)
        except MissingManifestError:
            return []
        except CorruptManifestError as exc:
            LOGGER.warning("%s; regenerating every image in this directory", exc)
            return []

    def save(self, path: Path, entries: Sequence[ImageEntry]) -> None:
        """Replace the manifest at ``path`` with ``entries``.

        The document is written to a sibling temporary file and renamed over the
        old manifest, so an interrupted write leaves the previous version intact.

        Raises:
            ManifestError: If the manifest cannot be written.
        """
        payload = [entry.model_dump(mode="json") for entry in entries]
        document = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        partial = path.with_name(f".{path.name}.partial")
        try:
            partial.write_text(document, encoding="utf-8")
            os.replace(partial, path)
        except OSError as exc:
            try:
                partial.unlink(missing_ok=True)
            except OSError:
                LOGGER.debug("could not remove partial manifest %s", partial)
            raise ManifestError(f"Could not write manifest {path}: {exc}") from exc


__all__ = [
    "ManifestStore",
    "ManifestIndex",
    "ImageEntry",
    "ManifestEntries",
    "ManifestError",
    "MissingManifestError",
    "CorruptManifestError",
    "MANIFEST_PREFIX",
    "MANIFEST_SUFFIX",
    "is_stale",
]
