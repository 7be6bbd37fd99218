"""Extract the SDK archive into the scratch directory."""

from __future__ import annotations

import shutil
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

from .utils import InstallError, log

_TAR_MODES = {
    (".tar.gz", ".tgz"): "r:gz",
    (".tar.bz2", ".tbz2"): "r:bz2",
    (".tar.xz", ".txz"): "r:xz",
    (".tar",): "r:",
}


class ExtractionError(InstallError):
    """Error during extraction process."""


@dataclass
class ExtractionResult:
    """Outcome of extracting `archive` into `destination`.

    Failures are kept in `error` instead of being raised, so the caller
    decides where they are reported.
    """

    archive: Path
    destination: Path
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Whether the archive was fully extracted."""
        return self.error is None


def _is_gzip(archive_path: Path) -> bool:
    with open(archive_path, "rb") as f:
        return f.read(2) == b"\x1f\x8b"


def _tar_mode(archive_path: Path) -> str | None:
    name = archive_path.name.lower()
    for suffixes, mode in _TAR_MODES.items():
        if name.endswith(suffixes):
            return mode
    if _is_gzip(archive_path):
        return "r:gz"
    return None


def _extract_zip(archive_path: Path, dest_dir: Path) -> None:
    """Extract a zip archive, keeping unix permissions when they were stored."""
    with zipfile.ZipFile(archive_path) as zip_file:
        for info in zip_file.infolist():
            target = Path(zip_file.extract(info, path=dest_dir))
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                target.chmod(mode)


def _extract_tar(archive_path: Path, dest_dir: Path, mode: str) -> None:
    with tarfile.open(archive_path, mode=mode) as tar:
        tar.extractall(path=dest_dir, filter="data")


def unpack(archive_path: Path, dest_dir: Path) -> None:
    """Decode `archive_path` and write all of its entries below `dest_dir`."""
    if zipfile.is_zipfile(archive_path):
        _extract_zip(archive_path, dest_dir)
        return

    mode = _tar_mode(archive_path)
    if mode is None:
        msg = f"Unsupported archive format: {archive_path}"
        raise ExtractionError(msg)
    _extract_tar(archive_path, dest_dir, mode)


def extract_archive(archive_path: Path, dest_dir: Path) -> ExtractionResult:
    """Extract `archive_path` into a freshly emptied `dest_dir`.

    Leftovers of an earlier extraction are always discarded first.
    """
    log("Extracting contents from the archive...", "info", "📦")
    result = ExtractionResult(archive=archive_path, destination=dest_dir)
    try:
        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        dest_dir.mkdir(parents=True)
        unpack(archive_path, dest_dir)
    except Exception as e:  # noqa: BLE001
        result.error = e
    else:
        log(f"Archive extracted to {dest_dir}", "success", "📦")
    return result
