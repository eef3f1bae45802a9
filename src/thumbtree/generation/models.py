"""Generation result models."""

from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


class GenerationResult(BaseModel):
    """Aggregate outcome of one generation run.

    Attributes:
        directories_visited: Directories that produced output (not skipped as empty).
        manifests_written: Manifest files written during the run.
        regenerated: Collection-relative paths regenerated in full.
        carried_over: Paths whose prior entry was kept because it was fresh.
        retained: Prior entries kept although their source is no longer listed.
        thumbnails_written: Number of thumbnail files written.
        failed: Paths whose regeneration failed.
        inaccessible: Subdirectories that could not be listed.
        skipped: Entries skipped because of unrepresentable names.
        errors: Human-readable error messages.
    """

    directories_visited: int = 0
    manifests_written: List[Path] = Field(default_factory=list)
    regenerated: List[str] = Field(default_factory=list)
    carried_over: List[str] = Field(default_factory=list)
    retained: List[str] = Field(default_factory=list)
    thumbnails_written: int = 0
    failed: List[str] = Field(default_factory=list)
    inaccessible: List[Path] = Field(default_factory=list)
    skipped: List[Path] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Return summary metrics in display order."""
        return {
            "directories": self.directories_visited,
            "manifests": len(self.manifests_written),
            "regenerated": len(self.regenerated),
            "carried_over": len(self.carried_over),
            "retained": len(self.retained),
            "thumbnails": self.thumbnails_written,
            "failed": len(self.failed),
            "inaccessible": len(self.inaccessible),
            "skipped": len(self.skipped),
        }


__all__ = ["GenerationResult"]
