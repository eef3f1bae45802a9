"""Directory listing and partitioning."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryListing:
    """Sorted contents of one directory relevant to generation.

    Attributes:
        subdirectories: Directories to descend into, excluding hidden names.
        images: Candidate image files.
        skipped: Entries ignored because their names are not representable text.
    """

    subdirectories: tuple[Path, ...] = ()
    images: tuple[Path, ...] = ()
    skipped: tuple[Path, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Return True when there is nothing to generate or descend into."""
        return not self.subdirectories and not self.images


class DirectoryScanner:
    """Partition directory entries into subdirectories and image candidates."""

    def __init__(self, *, image_extensions: Iterable[str], hidden_dirs: Iterable[str]) -> None:
        self.image_extensions = frozenset(ext.lstrip(".") for ext in image_extensions)
        self.hidden_dirs = frozenset(hidden_dirs)

    def scan(self, directory: Path) -> DirectoryListing:
        """Return the sorted listing of ``directory``.

        Entries are ordered by full path before partitioning, so the result does
        not depend on the platform's native listing order.

        Raises:
            OSError: If the directory cannot be read.
        """
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: Path(entry.path))

        subdirectories: list[Path] = []
        images: list[Path] = []
        skipped: list[Path] = []
        for entry in entries:
            path = Path(entry.path)
            if not _is_representable(entry.name):
                LOGGER.warning("skipping '%s': name is not valid unicode", path)
                skipped.append(path)
                continue
            if self._is_directory(entry):
                if entry.name not in self.hidden_dirs:
                    subdirectories.append(path)
            elif self.is_image(path) and _is_file(entry):
                images.append(path)

        return DirectoryListing(tuple(subdirectories), tuple(images), tuple(skipped))

    def is_image(self, path: Path) -> bool:
        """Return whether ``path`` has an allowed (case-sensitive) extension."""
        suffix = path.suffix[1:] if path.suffix else ""
        return suffix in self.image_extensions

    def is_accessible(self, directory: Path) -> bool:
        """Return whether ``directory`` can be listed."""
        try:
            with os.scandir(directory):
                return True
        except OSError:
            return False

    def _is_directory(self, entry: os.DirEntry[str]) -> bool:
        try:
            if entry.is_dir():
                return True
        except OSError:
            return True
        # A dangling link is reported as an inaccessible directory rather than ignored.
        return entry.is_symlink() and not os.path.exists(entry.path)


def _is_file(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def _is_representable(name: str) -> bool:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


__all__ = ["DirectoryListing", "DirectoryScanner"]
