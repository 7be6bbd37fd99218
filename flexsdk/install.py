"""Install pipeline: fetch, extract, normalize, stage, index."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from . import download
from .extract import ExtractionResult, extract_archive
from .normalize import NormalizationReport, normalize_line_endings
from .registry import BinaryRegistry
from .stage import fix_permissions, stage_tree, verify_installed_tree
from .utils import InstallError, current_platform, log

if TYPE_CHECKING:
    from .config import SdkConfig


class InstallStage(Enum):
    """Steps of an installation, in the order they run."""

    IDLE = "idle"
    CHECKING_SIZE = "checking size"
    DOWNLOADING = "downloading"
    SKIPPING_DOWNLOAD = "skipping download"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing line endings"
    STAGING = "staging"
    VERIFYING = "verifying"
    REFRESHING_INDEX = "refreshing index"
    FIXING_PERMISSIONS = "fixing permissions"
    CLEANING_UP = "cleaning up"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InstallResult:
    """What a successful installation produced."""

    bin_dir: Path
    binaries: dict[str, Path]
    downloaded: bool
    report: NormalizationReport
    fixed_permissions: list[Path] = field(default_factory=list)


def cleanup_scratch(scratch_dir: Path) -> bool:
    """Remove the extraction directory; failing to do so is only a warning."""
    try:
        shutil.rmtree(scratch_dir)
    except FileNotFoundError:
        return True
    except OSError as e:
        log(
            "Could not delete the temporary directory but that is OK.\n"
            "The next install should take care of that!\n"
            f"Root cause: {e}",
            "warning",
            "⚠️",
        )
        return False
    return True


class Installer:
    """Runs the install stages one after the other.

    Any `InstallError` moves the installer to `InstallStage.FAILED` and is
    re-raised with the stage it happened in; a stray `OSError` is wrapped
    in one first. Nothing is retried.
    """

    def __init__(
        self,
        config: SdkConfig,
        registry: BinaryRegistry | None = None,
        platform: str | None = None,
    ) -> None:
        """Initialize the installer for `config`."""
        self.config = config
        self.platform = platform or current_platform()
        self.registry = registry or BinaryRegistry(config.install_dir, self.platform)
        self.stage = InstallStage.IDLE
        self.history: list[InstallStage] = [self.stage]

    def _enter(self, stage: InstallStage) -> None:
        self.stage = stage
        self.history.append(stage)
        log(f"Stage: {stage.value}", "debug")

    def run(self) -> InstallResult:
        """Install the SDK and return the indexed binaries."""
        try:
            return self._run()
        except InstallError as e:
            if e.stage is None:
                e.stage = self.stage
            self._enter(InstallStage.FAILED)
            raise
        except OSError as e:
            error = InstallError(str(e), stage=self.stage)
            self._enter(InstallStage.FAILED)
            raise error from e

    def _run(self) -> InstallResult:
        downloaded = self._fetch()
        extraction = self._extract()
        report = self._normalize(extraction)
        self._stage()
        self._verify()
        binaries = self._refresh_index()
        fixed = self._fix_permissions(binaries)

        log(
            f"SUCCESS! The Flex SDK {self.config.version} binaries are available at:\n"
            f"  {self.registry.bin_dir}",
            "success",
            "🎉",
        )

        self._enter(InstallStage.CLEANING_UP)
        cleanup_scratch(self.config.scratch_dir)
        self._enter(InstallStage.DONE)
        return InstallResult(
            bin_dir=self.registry.bin_dir,
            binaries=binaries,
            downloaded=downloaded,
            report=report,
            fixed_permissions=fixed,
        )

    def _fetch(self) -> bool:
        self._enter(InstallStage.CHECKING_SIZE)
        if not download.needs_download(self.config):
            self._enter(InstallStage.SKIPPING_DOWNLOAD)
            return False
        self._enter(InstallStage.DOWNLOADING)
        download.download_file(
            self.config.url,
            self.config.cached_file,
            timeout=self.config.timeout,
            progress_interval=self.config.progress_interval,
        )
        return True

    def _extract(self) -> ExtractionResult:
        self._enter(InstallStage.EXTRACTING)
        return extract_archive(self.config.cached_file, self.config.scratch_dir)

    def _normalize(self, extraction: ExtractionResult) -> NormalizationReport:
        self._enter(InstallStage.NORMALIZING)
        return normalize_line_endings(
            self.config.scratch_dir,
            self.config.install_log,
            extraction_error=extraction.error,
        )

    def _stage(self) -> None:
        self._enter(InstallStage.STAGING)
        stage_tree(self.config.scratch_dir, self.config.install_dir)

    def _verify(self) -> None:
        self._enter(InstallStage.VERIFYING)
        verify_installed_tree(self.config.install_dir)

    def _refresh_index(self) -> dict[str, Path]:
        self._enter(InstallStage.REFRESHING_INDEX)
        return self.registry.refresh()

    def _fix_permissions(self, binaries: dict[str, Path]) -> list[Path]:
        self._enter(InstallStage.FIXING_PERMISSIONS)
        return fix_permissions(binaries, self.platform)


def install(config: SdkConfig, platform: str | None = None) -> InstallResult:
    """Run a complete installation for `config`."""
    return Installer(config, platform=platform).run()
