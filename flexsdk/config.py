"""Configuration management for flexsdk."""

from __future__ import annotations

import dataclasses
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from .utils import log

DEFAULT_CONFIG_FILE = Path(__file__).parent / "flexsdk.yaml"
DEFAULT_URL = "http://download.macromedia.com/pub/flex/sdk/flex_sdk_4.6.zip"
PROGRESS_INTERVAL = 800_000

_PATH_FIELDS = ("cache_dir", "scratch_dir", "install_root")


def _tmp_root() -> Path:
    return Path(tempfile.gettempdir()) / "flex_sdk"


@dataclass(frozen=True)
class SdkConfig:
    """Where the SDK archive comes from and where it ends up.

    All paths are fixed once the config is built; use `with_overrides` to
    derive a new config instead of mutating one.
    """

    url: str = DEFAULT_URL
    version: str = "4.6"
    cache_dir: Path = field(default_factory=lambda: _tmp_root() / "downloads")
    scratch_dir: Path = field(default_factory=lambda: _tmp_root() / "extractions")
    install_root: Path = field(
        default_factory=lambda: Path(os.path.expanduser("~/.flexsdk")),
    )
    timeout: float = 30
    progress_interval: int = PROGRESS_INTERVAL

    @property
    def file_name(self) -> str:
        """Name of the archive as published at `url`."""
        return urlparse(self.url).path.split("/")[-1] or "flex_sdk.zip"

    @property
    def cached_file(self) -> Path:
        """Local copy of the downloaded archive."""
        return self.cache_dir / self.file_name

    @property
    def install_dir(self) -> Path:
        """Final installation directory of the SDK."""
        return self.install_root / "lib" / "flex_sdk"

    @property
    def install_log(self) -> Path:
        """Diagnostic log written when line-ending conversion had errors."""
        return self.install_root / "install.log"

    def with_overrides(self, **overrides: Any) -> SdkConfig:
        """Return a copy with the non-None `overrides` applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **_normalize(values))

    @classmethod
    def load_from_file(cls, config_path: str | Path | None = None) -> SdkConfig:
        """Load configuration from YAML file."""
        if not config_path:
            config_path = DEFAULT_CONFIG_FILE

        try:
            with open(config_path) as file:
                config_data = yaml.safe_load(file) or {}
        except FileNotFoundError:
            log(f"Configuration file not found: {config_path}", "warning", "⚠️")
            return cls()
        except yaml.YAMLError as e:
            log(f"Invalid YAML in configuration file {config_path}: {e}", "error", "❌")
            return cls()

        return config_from_dict(config_data)


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    """Expand user paths and coerce numbers."""
    data = dict(data)
    for key in _PATH_FIELDS:
        if isinstance(data.get(key), (str, Path)):
            data[key] = Path(os.path.expanduser(str(data[key])))
    if "version" in data:
        data["version"] = str(data["version"])
    if "timeout" in data:
        data["timeout"] = float(data["timeout"])
    if "progress_interval" in data:
        data["progress_interval"] = int(data["progress_interval"])
    return data


def config_from_dict(data: dict[str, Any]) -> SdkConfig:
    """Build an `SdkConfig` from a raw mapping, ignoring unknown keys."""
    known = {f.name for f in dataclasses.fields(SdkConfig)}
    unknown = sorted(set(data) - known)
    for key in unknown:
        log(f"Ignoring unknown configuration key '{key}'", "warning", "⚠️")
    return SdkConfig(**_normalize({k: v for k, v in data.items() if k in known}))
