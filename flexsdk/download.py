"""Download functions for flexsdk."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, NamedTuple

import requests

from .utils import InstallError, log

if TYPE_CHECKING:
    from .config import SdkConfig

CHUNK_SIZE = 8192
UNKNOWN_SIZE = -1


class DownloadError(InstallError):
    """The archive could not be downloaded."""


class CacheState(NamedTuple):
    """Whether a cached archive exists, and its size if so."""

    exists: bool
    size: int | None = None


def request_options(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Build the proxy keyword arguments for a request.

    When `http_proxy` is set, the connection is routed through the proxy.
    `requests` derives the `Host` header from the URL of every hop, so
    redirects to another host keep the right one.
    """
    if environ is None:
        environ = os.environ
    proxy = environ.get("http_proxy") or environ.get("HTTP_PROXY")
    if not proxy:
        return {}
    return {"proxies": {"http": proxy, "https": proxy}}


def fetch_remote_size(url: str, timeout: float = 30) -> int:
    """Return the size announced by the server, or -1 if it is unknown.

    Only the headers are requested. Network errors propagate.
    """
    response = requests.head(
        url,
        allow_redirects=True,
        timeout=timeout,
        **request_options(),
    )
    try:
        if not response.ok:
            log(f"HEAD {url} returned status {response.status_code}", "debug")
            return UNKNOWN_SIZE
        # This might not work if the remote content is served gzipped
        try:
            return int(response.headers.get("content-length", UNKNOWN_SIZE))
        except ValueError:
            return UNKNOWN_SIZE
    finally:
        response.close()


def check_cache(path: Path) -> CacheState:
    """Inspect the cached archive at `path`."""
    try:
        if not path.is_file():
            return CacheState(exists=False)
        return CacheState(exists=True, size=path.stat().st_size)
    except OSError as e:
        msg = f"Cannot inspect the cached archive {path}: {e}"
        raise DownloadError(msg) from e


def download_file(
    url: str,
    destination: Path,
    timeout: float = 30,
    progress_interval: int = 800_000,
) -> Path:
    """Stream `url` into `destination`, reporting progress along the way."""
    # The previous download is not removed up front so it can be reused
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create the download directory {destination.parent}: {e}"
        raise DownloadError(msg) from e

    log(f"Requesting {url}", "info", "📥")
    try:
        response = requests.get(url, stream=True, timeout=timeout, **request_options())
    except requests.RequestException as e:
        msg = f"Failed to download {url}: {e}"
        raise DownloadError(msg) from e

    with response:
        log("Receiving...", "info")
        if response.status_code != 200:  # noqa: PLR2004
            headers = dict(response.headers)
            msg = f"Error with HTTP request (status {response.status_code}):\n{headers}"
            raise DownloadError(msg)

        count = 0
        notified_count = 0
        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    f.write(chunk)
                    count += len(chunk)
                    if count - notified_count > progress_interval:
                        log(f"Received {count // 1024}KB...")
                        notified_count = count
        except (requests.RequestException, OSError) as e:
            msg = f"Failed to download {url}: {e}"
            raise DownloadError(msg) from e

    log(f"Received {count // 1024}KB total!", "success", "✅")
    return destination


def needs_download(config: SdkConfig) -> bool:
    """Decide whether the cached archive must be (re)downloaded.

    A failed size request is not fatal; it only means the archive is
    downloaded again.
    """
    cache = check_cache(config.cached_file)
    if not cache.exists:
        return True

    log(
        "It appears that the desired archive is already downloaded. Verifying file size...",
        "info",
        "🔍",
    )
    try:
        remote_size = fetch_remote_size(config.url, timeout=config.timeout)
    except requests.RequestException as e:
        log(f"Could not determine the remote file size: {e}", "warning", "⚠️")
        remote_size = UNKNOWN_SIZE

    if remote_size == cache.size:
        log(
            f"The local file size matched the remote file size (both: {cache.size})! "
            "Skipping download.",
            "success",
            "✅",
        )
        return False
    log(
        f"The local file size ({cache.size}) did not match the remote file size "
        f"({remote_size}). Proceeding to download...",
        "warning",
        "⚠️",
    )
    return True

