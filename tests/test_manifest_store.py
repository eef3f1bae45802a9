"""Tests for manifest persistence and prior-entry lookup."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from thumbtree.manifest import (
    CorruptManifestError,
    ImageEntry,
    ManifestIndex,
    ManifestStore,
    MissingManifestError,
    is_stale,
)
from thumbtree.metadata import ColorLabel, MetadataRecord, PickLabel

STAMP = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def _entry(filename: str, *, modified_time: datetime = STAMP) -> ImageEntry:
    return ImageEntry(
        filename=filename,
        sha1sum="da39a3ee5e6b4b0d3255bfef95601890afd80709",
        modified_time=modified_time,
        metadata=MetadataRecord(
            size=(4000, 3000),
            orientation="rotation: normal",
            exposure_time=(1, 250),
            fnumber=(28, 10),
            camera_model="X100V",
            rating=4,
            tags=["Places/Berlin"],
            digikam_pick_label=PickLabel.ACCEPTED,
            digikam_color_label=ColorLabel.GREEN,
        ),
        thumbnail_sizes=[(100, 75), (800, 600)],
    )


def test_manifest_name_uses_source_directory_name() -> None:
    store = ManifestStore()

    assert store.manifest_name(Path("/photos/2024/B")) == "_B.json"
    assert store.manifest_path(Path("/photos/A"), Path("/out/A")) == Path("/out/A/_A.json")


def test_save_and_load_preserve_entries(tmp_path: Path) -> None:
    store = ManifestStore()
    path = tmp_path / "_A.json"
    entries = [_entry("A/b.jpg"), _entry("A/a.jpg")]

    store.save(path, entries)
    loaded = store.load(path)

    assert loaded == entries
    assert [entry.filename for entry in loaded] == ["A/b.jpg", "A/a.jpg"]
    assert not (tmp_path / "._A.json.partial").exists()


def test_saved_document_is_a_plain_json_array(tmp_path: Path) -> None:
    store = ManifestStore()
    path = tmp_path / "_A.json"

    store.save(path, [_entry("A/photo1.jpg")])
    document = json.loads(path.read_text(encoding="utf-8"))

    assert isinstance(document, list)
    record = document[0]
    assert record["filename"] == "A/photo1.jpg"
    assert record["thumbnail_sizes"] == [[100, 75], [800, 600]]
    assert record["metadata"]["exposure_time"] == [1, 250]
    assert record["metadata"]["digikam_pick_label"] == "accepted"
    assert record["metadata"]["lens_model"] is None


def test_saving_twice_is_byte_identical(tmp_path: Path) -> None:
    store = ManifestStore()
    path = tmp_path / "_A.json"
    entries = [_entry("A/photo1.jpg")]

    store.save(path, entries)
    first = path.read_bytes()
    store.save(path, store.load(path))

    assert path.read_bytes() == first


def test_load_missing_manifest_raises(tmp_path: Path) -> None:
    store = ManifestStore()

    with pytest.raises(MissingManifestError):
        store.load(tmp_path / "_absent.json")
    assert store.load_or_empty(tmp_path / "_absent.json") == []


@pytest.mark.parametrize(
    "content",
    ["{not json", '{"filename": "a.jpg"}', '[{"filename": "a.jpg"}]'],
)
def test_corrupt_manifest_is_reported_and_treated_as_empty(tmp_path: Path, content: str) -> None:
    store = ManifestStore()
    path = tmp_path / "_A.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CorruptManifestError):
        store.load(path)
    assert store.load_or_empty(path) == []


def test_naive_modified_time_is_read_as_utc() -> None:
    entry = ImageEntry(filename="a.jpg", sha1sum="00", modified_time=datetime(2024, 5, 1, 12, 30))

    assert entry.modified_time == STAMP


def test_is_stale_rule() -> None:
    entry = _entry("a.jpg")

    assert is_stale(None, STAMP)
    assert is_stale(entry, STAMP + timedelta(seconds=1))
    assert not is_stale(entry, STAMP)
    assert not is_stale(entry, STAMP - timedelta(days=1))


def test_manifest_index_tracks_unclaimed_entries() -> None:
    first = _entry("A/one.jpg")
    duplicate = _entry("A/one.jpg", modified_time=STAMP + timedelta(days=1))
    gone = _entry("A/gone.jpg")
    index = ManifestIndex([first, gone, duplicate])

    assert index.claim("A/one.jpg") is first
    assert index.claim("A/new.jpg") is None
    assert index.unclaimed() == [gone]
