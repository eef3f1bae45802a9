"""Incremental thumbnail and manifest generation over a directory tree."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from thumbtree.config.models import GenerationOptions
from thumbtree.imaging import RenderError, RenditionFanOut, ThumbnailRenderer, load_canonical
from thumbtree.manifest import ImageEntry, ManifestError, ManifestIndex, ManifestStore, is_stale
from thumbtree.metadata import MetadataExtractor

from .discovery import DirectoryScanner
from .fingerprint import HashComputer
from .models import GenerationResult
from .progress import TreeReporter

LOGGER = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised for failures that abort a whole run."""


@dataclass(frozen=True, slots=True)
class _RunContext:
    """Per-run state shared by every directory of the walk."""

    input_root: Path
    output_root: Path
    fan_out: RenditionFanOut
    result: GenerationResult


class GenerationPipeline:
    """Walk a source tree and keep its thumbnails and manifests up to date.

    Directories are visited depth-first in sorted order on the calling thread.
    Only the renders of a single stale image run in parallel, on a thread pool
    created per run and shared by all files.
    """

    def __init__(
        self,
        options: GenerationOptions,
        *,
        scanner: Optional[DirectoryScanner] = None,
        store: Optional[ManifestStore] = None,
        extractor: Optional[MetadataExtractor] = None,
        hasher: Optional[HashComputer] = None,
        renderer: Optional[ThumbnailRenderer] = None,
        reporter: Optional[TreeReporter] = None,
    ) -> None:
        self.options = options
        self.scanner = scanner or DirectoryScanner(
            image_extensions=options.image_extensions,
            hidden_dirs=options.hidden_dirs,
        )
        self.store = store or ManifestStore()
        self.extractor = extractor or MetadataExtractor()
        self.hasher = hasher or HashComputer()
        self.renderer = renderer or ThumbnailRenderer()
        self.reporter = reporter or TreeReporter(enabled=False)

    def run(self, input_root: Path, output_root: Path) -> GenerationResult:
        """Bring ``output_root`` up to date with ``input_root``.

        Args:
            input_root: Collection root; manifest keys are relative to it.
            output_root: Destination root mirroring the collection.

        Returns:
            GenerationResult: Counts and per-path outcomes for the run.

        Raises:
            GenerationError: If the input is not a readable directory or the root
                output directory cannot be created.
        """
        input_root = input_root.expanduser().absolute()
        output_root = output_root.expanduser().absolute()
        if not input_root.is_dir():
            raise GenerationError(f"Input path {input_root} is not a directory.")
        if self.options.compare_by_hash:
            LOGGER.debug("compare_by_hash is reserved; staleness uses modification times only")

        result = GenerationResult()
        with ThreadPoolExecutor(
            max_workers=self.options.max_workers or os.cpu_count() or 1,
            thread_name_prefix="thumbtree-render",
        ) as executor:
            context = _RunContext(
                input_root=input_root,
                output_root=output_root,
                fan_out=RenditionFanOut(self.renderer, executor),
                result=result,
            )
            self._walk(context, input_root, output_root, ())
        return result

    def _walk(
        self,
        context: _RunContext,
        source_dir: Path,
        output_dir: Path,
        ancestors: tuple[bool, ...],
    ) -> None:
        result = context.result
        try:
            listing = self.scanner.scan(source_dir)
        except OSError as exc:
            LOGGER.warning("skipping unreadable directory '%s': %s", source_dir, exc)
            result.errors.append(f"{source_dir}: {exc}")
            return

        result.skipped.extend(listing.skipped)
        if listing.is_empty:
            LOGGER.debug("nothing to generate under %s", source_dir)
            return

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            if output_dir == context.output_root:
                raise GenerationError(
                    f"Could not create output directory {output_dir}: {exc}"
                ) from exc
            LOGGER.warning("skipping '%s': cannot create '%s': %s", source_dir, output_dir, exc)
            result.errors.append(f"{output_dir}: {exc}")
            return
        result.directories_visited += 1

        manifest_path = self.store.manifest_path(source_dir, output_dir)
        index = ManifestIndex(self.store.load_or_empty(manifest_path))

        entries: list[ImageEntry] = []
        image_count = len(listing.images)
        for position, image_path in enumerate(listing.images):
            has_more = position < image_count - 1 or bool(listing.subdirectories)
            entry = self._resolve_image(
                context, image_path, output_dir, index, ancestors, has_more
            )
            if entry is not None:
                entries.append(entry)

        # Entries of sources that disappeared are kept; pruning is not supported.
        retained = index.unclaimed()
        result.retained.extend(entry.filename for entry in retained)
        entries.extend(retained)

        if entries:
            try:
                self.store.save(manifest_path, entries)
            except ManifestError as exc:
                LOGGER.warning("%s", exc)
                result.errors.append(str(exc))
            else:
                result.manifests_written.append(manifest_path)
                self.reporter.manifest_written(ancestors, manifest_path.name)

        subdir_count = len(listing.subdirectories)
        for position, subdir in enumerate(listing.subdirectories):
            has_more = position < subdir_count - 1
            if not self.scanner.is_accessible(subdir):
                LOGGER.warning("skipping inaccessible directory '%s'", subdir)
                self.reporter.directory(ancestors, has_more, subdir.name, accessible=False)
                result.inaccessible.append(subdir)
                continue
            self.reporter.directory(ancestors, has_more, subdir.name)
            self._walk(context, subdir, output_dir / subdir.name, ancestors + (has_more,))

    def _resolve_image(
        self,
        context: _RunContext,
        image_path: Path,
        output_dir: Path,
        index: ManifestIndex,
        ancestors: tuple[bool, ...],
        has_more: bool,
    ) -> Optional[ImageEntry]:
        """Return the entry for ``image_path``: carried over, regenerated, or prior."""
        result = context.result
        key = image_path.relative_to(context.input_root).as_posix()
        prior = index.claim(key)

        try:
            modified_time = datetime.fromtimestamp(image_path.stat().st_mtime, tz=timezone.utc)
        except OSError as exc:
            LOGGER.warning("cannot stat '%s': %s", image_path, exc)
            result.failed.append(key)
            result.errors.append(f"{key}: {exc}")
            return prior

        if not is_stale(prior, modified_time):
            LOGGER.debug("%s is up to date", key)
            result.carried_over.append(key)
            return prior

        LOGGER.debug("%s is %s", key, "new" if prior is None else "out of date")
        entry = self._regenerate(
            context, image_path, output_dir, key, modified_time, ancestors, has_more
        )
        if entry is None:
            # A failed regeneration never replaces the prior record with a partial one.
            return prior
        result.regenerated.append(key)
        return entry

    def _regenerate(
        self,
        context: _RunContext,
        image_path: Path,
        output_dir: Path,
        key: str,
        modified_time: datetime,
        ancestors: tuple[bool, ...],
        has_more: bool,
    ) -> Optional[ImageEntry]:
        renditions = self.options.renditions() if self.options.generate_thumbnails else []
        total = len(renditions) + 1
        name = image_path.name

        def _progress(done: int) -> None:
            self.reporter.file_progress(ancestors, has_more, name, done + 1, total)

        try:
            sha1sum = self.hasher.compute(image_path)
            metadata = self.extractor.extract(image_path)
            sizes: list[tuple[int, int]] = []
            if renditions:
                canonical = load_canonical(image_path)
                _progress(0)
                sizes = context.fan_out.render_all(
                    canonical, renditions, output_dir / name, on_complete=_progress
                )
        except (RenderError, OSError) as exc:
            LOGGER.warning("regeneration of '%s' failed: %s", image_path, exc)
            self.reporter.file_finished(ancestors, has_more, name, total, failed=True)
            context.result.failed.append(key)
            context.result.errors.append(f"{key}: {exc}")
            return None

        self.reporter.file_finished(ancestors, has_more, name, total)
        context.result.thumbnails_written += len(sizes)
        return ImageEntry(
            filename=key,
            sha1sum=sha1sum,
            modified_time=modified_time,
            metadata=metadata,
            thumbnail_sizes=sizes,
        )


__all__ = ["GenerationPipeline", "GenerationError"]
