"""flexsdk - Flex SDK installer.

Downloads a Flex SDK distribution, reusing an earlier download when its
size still matches, converts the line endings of the extracted files to
UNIX style and installs the result into a stable directory whose
binaries are then indexed and made executable.
"""

from __future__ import annotations

__version__ = "0.1.0"

from . import config, download, extract, install, normalize, registry, stage, utils

# Re-export commonly used functions
from .config import SdkConfig, config_from_dict
from .install import Installer, InstallResult, InstallStage
from .install import install as install_sdk
from .registry import BinaryRegistry
from .utils import InstallError, setup_logging

__all__ = [
    "BinaryRegistry",
    "InstallError",
    "InstallResult",
    "InstallStage",
    "Installer",
    "SdkConfig",
    "config",
    "config_from_dict",
    "download",
    "extract",
    "install",
    "install_sdk",
    "normalize",
    "registry",
    "setup_logging",
    "stage",
    "utils",
]
