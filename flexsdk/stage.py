"""Move the normalized SDK into place and repair its permissions."""

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Mapping
from pathlib import Path

from .utils import InstallError, log

EXECUTABLE_MODE = 0o755


class StagingError(InstallError):
    """The extracted files could not be copied to the installation directory."""


class VerificationError(InstallError):
    """The installation directory does not hold the copied files."""


class PermissionFixError(InstallError):
    """A binary could not be made executable."""


def stage_tree(scratch_dir: Path, install_dir: Path) -> None:
    """Replace `install_dir` with a copy of `scratch_dir`.

    Nothing from the previous installation is kept.
    """
    try:
        if install_dir.exists():
            shutil.rmtree(install_dir)
        install_dir.mkdir(parents=True)
    except OSError as e:
        msg = f"Could not clear the installation directory {install_dir}: {e}"
        raise StagingError(msg) from e

    try:
        shutil.copytree(scratch_dir, install_dir, symlinks=True, dirs_exist_ok=True)
    except (shutil.Error, OSError) as e:
        msg = f"Temporary files not copied to their final destination!\nError: {e}"
        raise StagingError(msg) from e


def verify_installed_tree(install_dir: Path) -> list[str]:
    """Make sure the copy actually produced files."""
    try:
        entries = os.listdir(install_dir)
    except OSError as e:
        msg = f"Cannot verify that temporary files were copied to their final destination!\nError: {e}"
        raise VerificationError(msg) from e
    if not entries:
        msg = "Temporary files were not copied to their final destination!"
        raise VerificationError(msg)
    return entries


def fix_permissions(binaries: Mapping[str, Path], platform: str) -> list[Path]:
    """Make the indexed binaries owner-executable.

    Archive extraction does not always keep the executable bit, so every
    binary lacking it gets the standard 755 mode. Windows is left alone.
    """
    if platform == "win32":
        return []

    fixed = []
    for binary_path in binaries.values():
        try:
            mode = binary_path.stat().st_mode
            if mode & stat.S_IXUSR:
                continue
            log(f"Fixing file permissions for: {binary_path}", "info", "🔧")
            binary_path.chmod(EXECUTABLE_MODE)
        except OSError as e:
            msg = f"Cannot make {binary_path} executable: {e}"
            raise PermissionFixError(msg) from e
        fixed.append(binary_path)
    return fixed
