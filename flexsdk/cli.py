"""Command-line interface for flexsdk."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import SdkConfig
from .install import install
from .registry import BinaryRegistry
from .utils import InstallError, console, is_verbose, log, setup_logging


def install_sdk(_args: argparse.Namespace, config: SdkConfig) -> None:
    """Download (if needed) and install the SDK."""
    result = install(config)
    log(f"{len(result.binaries)} binaries indexed", "info")


def list_binaries(_args: argparse.Namespace, config: SdkConfig) -> None:
    """List the binaries of the installed SDK."""
    registry = BinaryRegistry(config.install_dir)
    binaries = registry.refresh()
    if not binaries:
        log(f"No binaries found in {registry.bin_dir}", "warning", "⚠️")
        return
    log(f"Binaries in {registry.bin_dir}:", "info", "🔧")
    for name, path in binaries.items():
        console.print(f"  [green]{name}[/green] {path}")


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="flexsdk - Download and install the Flex SDK",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--config-file",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--install-root",
        type=str,
        help="Directory the SDK is installed below",
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        help="Directory the downloaded archive is kept in",
    )
    parser.add_argument("--url", type=str, help="URL of the SDK archive")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    install_parser = subparsers.add_parser("install", help="Install the SDK")
    install_parser.set_defaults(func=install_sdk)

    bins_parser = subparsers.add_parser("bins", help="List the installed binaries")
    bins_parser.set_defaults(func=list_binaries)

    version_parser = subparsers.add_parser("version", help="Print version information")
    version_parser.set_defaults(
        func=lambda _, __: console.print(f"[yellow]flexsdk[/] [bold]v{__version__}[/]"),
    )

    parser.set_defaults(func=install_sdk)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main function to parse arguments and execute commands."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = SdkConfig.load_from_file(args.config_file).with_overrides(
            url=args.url,
            cache_dir=Path(args.cache_dir) if args.cache_dir else None,
            install_root=Path(args.install_root) if args.install_root else None,
        )
        args.func(args, config)
    except InstallError as e:
        stage = f" while {e.stage.value}" if e.stage else ""
        log(f"Installation failed{stage}: {e.message}", "error", "❌")
        if is_verbose():
            console.print_exception()
        sys.exit(1)
    except Exception as e:
        log(f"Error: {e!s}", "error", "❌")
        console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
