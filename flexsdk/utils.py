"""Utility functions for flexsdk."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from .install import InstallStage

# Initialize rich console
console = Console()

_VERBOSE = False

LogLevel = Literal["info", "success", "warning", "error", "debug", "default"]

_STYLES: dict[str, str] = {
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
    "debug": "dim",
    "default": "",
}


class InstallError(Exception):
    """A fatal condition that ends the installation."""

    def __init__(self, message: str, stage: InstallStage | None = None) -> None:
        """Initialize the InstallError."""
        self.message = message
        self.stage = stage
        super().__init__(message)


def setup_logging(verbose: bool = False) -> None:  # noqa: FBT001, FBT002
    """Configure logging level based on verbosity."""
    global _VERBOSE  # noqa: PLW0603
    _VERBOSE = verbose


def is_verbose() -> bool:
    """Return whether debug output is enabled."""
    return _VERBOSE


def log(message: str, level: LogLevel = "default", emoji: str = "") -> None:
    """Print a message to the console with the style of its level."""
    if level == "debug" and not _VERBOSE:
        return
    style = _STYLES.get(level, "")
    text = escape(message)
    if style:
        text = f"[{style}]{text}[/{style}]"
    if emoji:
        text = f"{emoji} {text}"
    console.print(text)


def current_platform() -> str:
    """Return the platform identifier used to gate permission fixes."""
    return sys.platform
