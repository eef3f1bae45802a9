"""Content fingerprints recorded in manifests."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


class HashComputer:
    """Compute SHA-1 digests over full file contents."""

    def compute(self, path: Path) -> str:
        """Return the hex SHA-1 digest of ``path``.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.sha1()
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()


__all__ = ["HashComputer"]
