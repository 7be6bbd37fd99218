"""Configuration for pytest fixtures used in flexsdk tests."""

from __future__ import annotations

import io
import tarfile
import zipfile
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import pytest

from flexsdk.config import SdkConfig, config_from_dict
from flexsdk.utils import setup_logging

SDK_URL = "https://example.com/pub/flex/sdk/flex_sdk_4.6.zip"

# name -> (content, unix mode or None)
SDK_FILES: dict[str, tuple[bytes, int | None]] = {
    "README.txt": (b"Flex SDK\r\nRead me first\r\n", None),
    "sub/b.bin": (b"\x00\x01\r\n\x02\xff\r\n", None),
    "bin/mxmlc": (b"#!/bin/sh\r\necho mxmlc\r\n", 0o644),
    "bin/mxmlc.bat": (b"@echo off\r\necho mxmlc\r\n", 0o644),
    "bin/compc": (b"#!/bin/sh\r\necho compc\r\n", 0o755),
    "frameworks/flex-config.xml": (b"<flex-config>\n</flex-config>\n", None),
}


def make_zip(files: dict[str, tuple[bytes, int | None]]) -> bytes:
    """Create a zip archive with the specified files."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w") as zip_file:
        for name, (content, mode) in files.items():
            zip_info = zipfile.ZipInfo(name)
            if mode is not None:
                zip_info.external_attr = mode << 16
            zip_file.writestr(zip_info, content)
    return buffer.getvalue()


def make_tar_gz(files: dict[str, tuple[bytes, int | None]]) -> bytes:
    """Create a gzipped tar archive with the specified files."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, (content, mode) in files.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = mode if mode is not None else 0o644
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


class FakeResponse:
    """Just enough of `requests.Response` for the download code."""

    def __init__(
        self,
        content: bytes = b"",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.content = content
        self.status_code = status_code
        self.headers = (
            headers if headers is not None else {"content-length": str(len(content))}
        )
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400  # noqa: PLR2004

    def iter_content(self, chunk_size: int = 1) -> Generator[bytes, None, None]:
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass
class FakeServer:
    """Serves one archive for HEAD and GET requests."""

    content: bytes = b""
    status_code: int = 200
    head_headers: dict[str, str] | None = None
    head_error: Exception | None = None
    head_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    get_calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    responses: list[FakeResponse] = field(default_factory=list)

    def head(self, url: str, **kwargs: Any) -> FakeResponse:
        self.head_calls.append((url, kwargs))
        if self.head_error is not None:
            raise self.head_error
        return FakeResponse(b"", 200, self.head_headers or {"content-length": str(len(self.content))})

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.get_calls.append((url, kwargs))
        response = FakeResponse(self.content, self.status_code)
        self.responses.append(response)
        return response


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep proxy settings and verbosity from leaking into tests."""
    monkeypatch.delenv("http_proxy", raising=False)
    monkeypatch.delenv("HTTP_PROXY", raising=False)
    yield
    setup_logging(False)


@pytest.fixture
def sdk_archive() -> bytes:
    """A small Flex SDK lookalike as zip bytes."""
    return make_zip(SDK_FILES)


@pytest.fixture
def sdk_config(tmp_path: Path) -> SdkConfig:
    """A config whose directories all live below `tmp_path`."""
    return config_from_dict(
        {
            "url": SDK_URL,
            "cache_dir": str(tmp_path / "cache"),
            "scratch_dir": str(tmp_path / "scratch"),
            "install_root": str(tmp_path / "root"),
        },
    )


@pytest.fixture
def fake_server(sdk_archive: bytes) -> Generator[FakeServer, None, None]:
    """Patch `requests` so HEAD and GET hit an in-memory server."""
    server = FakeServer(content=sdk_archive)
    with (
        patch("flexsdk.download.requests.head", side_effect=server.head),
        patch("flexsdk.download.requests.get", side_effect=server.get),
    ):
        yield server


@pytest.fixture
def read_tree() -> Callable[[Path], dict[str, bytes]]:
    """Return a function mapping every file below a directory to its bytes."""

    def _read_tree(root: Path) -> dict[str, bytes]:
        return {
            p.relative_to(root).as_posix(): p.read_bytes()
            for p in sorted(root.rglob("*"))
            if p.is_file()
        }

    return _read_tree
