"""Index of the executables shipped in the installed SDK."""

from __future__ import annotations

from pathlib import Path

from .utils import InstallError, current_platform

WINDOWS_SUFFIXES = (".bat", ".cmd", ".exe")


class RegistryNotRefreshedError(RuntimeError):
    """The binary index was read before `refresh()` was called."""


class RegistryRefreshError(InstallError):
    """The installation could not be scanned for binaries."""


def is_binary_name(filename: str, platform: str) -> bool:
    """Whether `filename` in the SDK's bin directory is a launcher for `platform`."""
    if platform == "win32":
        return filename.lower().endswith(WINDOWS_SUFFIXES)
    return "." not in filename


class BinaryRegistry:
    """Maps logical binary names to files in `<install_dir>/bin`.

    The index is empty and unreadable until `refresh()` has scanned the
    installation; it has to be refreshed again whenever the installation
    changes.
    """

    def __init__(self, install_dir: Path, platform: str | None = None) -> None:
        """Initialize the registry for `install_dir`."""
        self.install_dir = install_dir
        self.platform = platform or current_platform()
        self._bin: dict[str, Path] | None = None

    @property
    def bin_dir(self) -> Path:
        """Directory holding the SDK launchers."""
        return self.install_dir / "bin"

    @property
    def refreshed(self) -> bool:
        """Whether the index reflects a scan of the installation."""
        return self._bin is not None

    @property
    def bin(self) -> dict[str, Path]:
        """The `{name: absolute path}` index."""
        if self._bin is None:
            msg = "The binary index is stale; call refresh() after installing"
            raise RegistryNotRefreshedError(msg)
        return dict(self._bin)

    def refresh(self) -> dict[str, Path]:
        """Rebuild the index from scratch by rescanning `bin_dir`."""
        index: dict[str, Path] = {}
        try:
            if self.bin_dir.is_dir():
                for entry in sorted(self.bin_dir.iterdir()):
                    if entry.is_file() and is_binary_name(entry.name, self.platform):
                        index.setdefault(entry.stem, entry.resolve())
        except OSError as e:
            msg = f"Cannot scan {self.bin_dir} for binaries: {e}"
            raise RegistryRefreshError(msg) from e
        self._bin = index
        return dict(index)
