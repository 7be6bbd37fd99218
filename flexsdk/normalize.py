"""Convert DOS line endings (CR-LF) to UNIX line endings (LF) in place."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Literal

from .extract import ExtractionError
from .utils import InstallError, log

# Same window git uses to tell text from binary content
BINARY_SNIFF_BYTES = 8000

Phase = Literal["convert", "process"]


class NormalizationCriticalError(InstallError):
    """The conversion could not continue."""


@dataclass
class NormalizationIssue:
    """A file or directory that could not be converted."""

    path: str
    phase: Phase
    error: str


@dataclass
class NormalizationReport:
    """Statistics and non-fatal errors of one conversion run."""

    directories: int = 0
    files: int = 0
    converted: int = 0
    skipped: int = 0
    errors: list[NormalizationIssue] = field(default_factory=list)

    def add_error(self, path: str | Path, phase: Phase, cause: BaseException) -> None:
        """Record a non-fatal error, keeping the order they happened in."""
        self.errors.append(NormalizationIssue(str(path), phase, f"{type(cause).__name__}: {cause}"))

    def stats(self) -> dict[str, int]:
        """Counters in the shape printed after the conversion."""
        return {
            "directories": self.directories,
            "files": self.files,
            "converted": self.converted,
            "skipped": self.skipped,
            "errors": len(self.errors),
        }


def is_binary(data: bytes) -> bool:
    """Treat content with a NUL byte near the start as binary."""
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def convert_file(path: Path, report: NormalizationReport) -> None:
    """Convert one file, recording failures in `report`."""
    try:
        data = path.read_bytes()
    except OSError as e:
        report.add_error(path, "process", e)
        return

    if is_binary(data) or b"\r\n" not in data:
        report.skipped += 1
        return

    try:
        path.write_bytes(data.replace(b"\r\n", b"\n"))
    except OSError as e:
        report.add_error(path, "convert", e)
        return
    report.converted += 1


def write_install_log(log_path: Path, issues: list[NormalizationIssue]) -> None:
    """Dump the ordered list of conversion errors as JSON."""
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text(json.dumps([asdict(i) for i in issues], indent=2) + "\n")
    log(
        f'There were errors during the dos2unix process. Check "{log_path}" for more details!',
        "warning",
        "⚠️",
    )


def _walk(root: Path, report: NormalizationReport) -> None:
    def on_error(e: OSError) -> None:
        report.add_error(e.filename or root, "process", e)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        report.directories += len(dirnames)
        for name in filenames:
            path = Path(dirpath) / name
            try:
                if path.is_symlink() or not path.is_file():
                    continue
            except OSError as e:
                report.add_error(path, "process", e)
                continue
            report.files += 1
            convert_file(path, report)


def normalize_line_endings(
    root: Path,
    log_path: Path,
    extraction_error: BaseException | None = None,
) -> NormalizationReport:
    """Convert every file below `root` from CR-LF to LF.

    A failed extraction is reported here and ends the install. Per-file
    errors are collected and written to `log_path`; they do not stop the
    walk. Anything else aborts it.
    """
    if extraction_error is not None:
        msg = f"Error extracting archive: {extraction_error}"
        raise ExtractionError(msg) from extraction_error

    report = NormalizationReport()
    try:
        if not root.is_dir():
            msg = f"Extraction directory does not exist: {root}"
            raise NormalizationCriticalError(msg)
        _walk(root, report)
    except Exception as e:
        if report.errors:
            write_install_log(log_path, report.errors)
        log("Exiting prematurely...", "error")
        if isinstance(e, NormalizationCriticalError):
            raise
        msg = f"Critical error while fixing line endings: {e}"
        raise NormalizationCriticalError(msg) from e

    if report.errors:
        write_install_log(log_path, report.errors)
    log(f"dos2unix conversion stats: {json.dumps(report.stats())}", "info")
    return report
