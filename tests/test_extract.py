"""Tests for flexsdk.extract."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from conftest import SDK_FILES, make_tar_gz, make_zip

from flexsdk.extract import ExtractionError, extract_archive


@pytest.fixture
def archive_path(tmp_path: Path) -> Path:
    path = tmp_path / "flex_sdk.zip"
    path.write_bytes(make_zip(SDK_FILES))
    return path


def test_extract_zip(archive_path: Path, tmp_path: Path) -> None:
    """All entries end up below the destination, untouched."""
    dest = tmp_path / "extractions"
    result = extract_archive(archive_path, dest)

    assert result.ok
    assert result.error is None
    for name, (content, _) in SDK_FILES.items():
        assert (dest / name).read_bytes() == content


@pytest.mark.skipif(sys.platform == "win32", reason="unix permissions")
def test_extract_zip_keeps_stored_modes(archive_path: Path, tmp_path: Path) -> None:
    """Unix modes recorded in the zip are applied."""
    dest = tmp_path / "extractions"
    extract_archive(archive_path, dest)

    assert (dest / "bin" / "compc").stat().st_mode & 0o777 == 0o755
    assert (dest / "bin" / "mxmlc").stat().st_mode & 0o777 == 0o644


def test_extract_tar_gz(tmp_path: Path) -> None:
    """Tarballs are supported as well."""
    archive = tmp_path / "flex_sdk.tar.gz"
    archive.write_bytes(make_tar_gz(SDK_FILES))
    dest = tmp_path / "extractions"

    result = extract_archive(archive, dest)

    assert result.ok
    assert (dest / "bin" / "mxmlc").read_bytes() == SDK_FILES["bin/mxmlc"][0]


def test_extract_discards_previous_extraction(archive_path: Path, tmp_path: Path) -> None:
    """Leftovers of an earlier run are never merged with the new files."""
    dest = tmp_path / "extractions"
    (dest / "old").mkdir(parents=True)
    (dest / "old" / "leftover.txt").write_text("stale")

    extract_archive(archive_path, dest)

    assert not (dest / "old").exists()
    assert (dest / "README.txt").exists()


def test_extract_corrupt_archive_is_captured(tmp_path: Path) -> None:
    """A broken archive yields an error value instead of raising."""
    archive = tmp_path / "flex_sdk.zip"
    archive.write_bytes(b"this is not a zip file")

    result = extract_archive(archive, tmp_path / "extractions")

    assert not result.ok
    assert isinstance(result.error, ExtractionError)
    assert "Unsupported archive format" in str(result.error)


def test_extract_truncated_zip_is_captured(archive_path: Path, tmp_path: Path) -> None:
    """Decode errors are captured too."""
    data = archive_path.read_bytes()
    archive_path.write_bytes(data[: len(data) // 2])

    result = extract_archive(archive_path, tmp_path / "extractions")

    assert not result.ok


def test_extract_missing_archive(tmp_path: Path) -> None:
    """A missing archive is an extraction error, not an exception."""
    result = extract_archive(tmp_path / "missing.zip", tmp_path / "extractions")
    assert isinstance(result.error, FileNotFoundError)
