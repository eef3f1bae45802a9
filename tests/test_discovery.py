"""Tests for directory listing and partitioning."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from thumbtree.generation import DirectoryScanner


def _scanner(**overrides) -> DirectoryScanner:
    options = {"image_extensions": ["jpg", "JPG"], "hidden_dirs": ["raw", "0-sterne"]}
    options.update(overrides)
    return DirectoryScanner(**options)


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def test_scan_partitions_and_sorts_entries(tmp_path: Path) -> None:
    for name in ("b.jpg", "a.JPG", "c.jpeg", "notes.txt", "Z.jpg"):
        _touch(tmp_path / name)
    for name in ("sub2", "sub1", "raw", "rawdata", "0-sterne"):
        (tmp_path / name).mkdir()

    listing = _scanner().scan(tmp_path)

    assert [path.name for path in listing.images] == ["Z.jpg", "a.JPG", "b.jpg"]
    assert [path.name for path in listing.subdirectories] == ["rawdata", "sub1", "sub2"]
    assert listing.skipped == ()
    assert not listing.is_empty


def test_extension_match_is_case_sensitive(tmp_path: Path) -> None:
    scanner = _scanner(image_extensions=["jpg"])

    assert scanner.is_image(Path("photo.jpg"))
    assert not scanner.is_image(Path("photo.JPG"))
    assert not scanner.is_image(Path("photo.Jpg"))
    assert not scanner.is_image(Path("jpg"))


def test_directory_named_like_an_image_is_a_directory(tmp_path: Path) -> None:
    (tmp_path / "album.jpg").mkdir()

    listing = _scanner().scan(tmp_path)

    assert listing.images == ()
    assert [path.name for path in listing.subdirectories] == ["album.jpg"]


def test_empty_directory_listing(tmp_path: Path) -> None:
    _touch(tmp_path / "readme.md")
    (tmp_path / "raw").mkdir()

    assert _scanner().scan(tmp_path).is_empty


def test_scan_unreadable_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        _scanner().scan(tmp_path / "missing")


def test_is_accessible(tmp_path: Path) -> None:
    scanner = _scanner()

    assert scanner.is_accessible(tmp_path)
    assert not scanner.is_accessible(tmp_path / "missing")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_dangling_symlink_is_listed_as_directory(tmp_path: Path) -> None:
    (tmp_path / "gone").symlink_to(tmp_path / "does-not-exist")

    listing = _scanner().scan(tmp_path)

    assert [path.name for path in listing.subdirectories] == ["gone"]
    assert not _scanner().is_accessible(listing.subdirectories[0])


def test_names_that_are_not_unicode_are_reported_as_skipped(tmp_path: Path) -> None:
    bad_dir = os.fsencode(tmp_path) + b"/raw\xffdata"
    try:
        os.mkdir(bad_dir)
    except OSError:
        pytest.skip("filesystem rejects non-UTF-8 names")
    _touch(Path(os.fsdecode(bad_dir)) / "inner.jpg")
    _touch(tmp_path / "ok.jpg")

    listing = _scanner().scan(tmp_path)

    assert [path.name for path in listing.images] == ["ok.jpg"]
    assert listing.subdirectories == ()
    assert [path.name for path in listing.skipped] == [os.fsdecode(b"raw\xffdata")]
