# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures: fake collaborators and in-test archive builders."""

from __future__ import annotations

import gzip
import io
import json
import stat
import tarfile
import zipfile
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import Any

import pytest

from toolchest.context import OperationContext
from toolchest.errors import TransportError
from toolchest.plugins.base import PluginServices
from toolchest.reporting import Reporter
from toolchest.settings import EngineSettings


class FakeResponse:
    """In-memory stand-in for a streamed HTTP response."""

    def __init__(
        self,
        *,
        status_code: int = 200,
        body: bytes = b"",
        json_data: Any = None,
        links: Mapping[str, Mapping[str, str]] | None = None,
        fail_after: int | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers: dict[str, str] = {}
        self._body = json.dumps(json_data).encode() if json_data is not None else body
        self._links = dict(links or {})
        self._fail_after = fail_after
        self.closed = False

    @property
    def links(self) -> Mapping[str, Mapping[str, str]]:
        return self._links

    @property
    def text(self) -> str:
        return self._body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self._body)

    def iter_content(self, chunk_size: int = 65536) -> Iterator[bytes]:
        for offset in range(0, len(self._body), chunk_size):
            if self._fail_after is not None and offset >= self._fail_after:
                raise TransportError("connection reset")
            yield self._body[offset : offset + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeHttpClient:
    """Route GET requests to canned responses keyed by URL."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[], FakeResponse] | Exception] = {}
        self.calls: list[dict[str, Any]] = []

    def add(self, url: str, **response: Any) -> None:
        self.routes[url] = lambda: FakeResponse(**response)

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        stream: bool = False,
        timeout: float | None = None,
    ) -> FakeResponse:
        self.calls.append({"url": url, "headers": dict(headers or {}), "params": dict(params or {})})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404, body=b"not found")
        if isinstance(route, Exception):
            raise route
        return route()

    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


class FakeRunner:
    """Record commands instead of executing them."""

    def __init__(
        self,
        handler: Callable[[list[str], Path | None], CompletedProcess[str]] | None = None,
        *,
        missing: Sequence[str] = (),
    ) -> None:
        self.commands: list[list[str]] = []
        self._handler = handler
        self._missing = set(missing)

    def run(
        self,
        ctx: OperationContext,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        capture_output: bool = False,
    ) -> CompletedProcess[str]:
        ctx.check()
        self.commands.append(list(args))
        if self._handler is not None:
            return self._handler(list(args), cwd)
        return CompletedProcess(args=list(args), returncode=0, stdout="", stderr="")

    def which(self, name: str) -> str | None:
        if name in self._missing:
            return None
        return f"/usr/bin/{name}"


class FakeSource:
    """Release source with fixed tags and releases."""

    def __init__(self, *, tags: Sequence[str] = (), releases: Sequence[str] = ()) -> None:
        self.tags = list(tags)
        self.releases = list(releases)
        self.calls: list[tuple[str, str]] = []

    def list_tags(self, ctx: OperationContext, repo_url: str) -> list[str]:
        self.calls.append(("tags", repo_url))
        return list(self.tags)

    def list_releases(self, ctx: OperationContext, repo_url: str) -> list[str]:
        self.calls.append(("releases", repo_url))
        return list(self.releases)

    def list_release_assets(self, ctx: OperationContext, repo_url: str, tag: str) -> list[Any]:
        return []


def _payload(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def build_tar(
    path: Path,
    files: Mapping[str, bytes | str],
    *,
    mode: str = "w:gz",
    symlinks: Mapping[str, str] | None = None,
    file_mode: int = 0o644,
) -> Path:
    """Write a tarball holding ``files`` and ``symlinks`` to ``path``."""

    with tarfile.open(path, mode) as archive:
        for name, content in files.items():
            data = _payload(content)
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = file_mode
            archive.addfile(info, io.BytesIO(data))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            archive.addfile(info)
    return path


def build_zip(
    path: Path,
    files: Mapping[str, bytes | str],
    *,
    symlinks: Mapping[str, str] | None = None,
) -> Path:
    """Write a zip archive holding ``files`` and ``symlinks`` to ``path``."""

    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            info = zipfile.ZipInfo(name)
            info.external_attr = (stat.S_IFREG | 0o644) << 16
            archive.writestr(info, _payload(content))
        for name, target in (symlinks or {}).items():
            info = zipfile.ZipInfo(name)
            info.external_attr = (stat.S_IFLNK | 0o777) << 16
            archive.writestr(info, target)
    return path


def build_gz(path: Path, content: bytes | str) -> Path:
    path.write_bytes(gzip.compress(_payload(content)))
    return path


@pytest.fixture
def ctx() -> OperationContext:
    return OperationContext.background()


@pytest.fixture
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> EngineSettings:
    return EngineSettings(
        data_dir=tmp_path / "data",
        quiet=True,
        min_download_size=0,
        tool_sums_path=tmp_path / ".tool-sums",
        arch_override="x86_64",
    )


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def services(
    http: FakeHttpClient,
    source: FakeSource,
    runner: FakeRunner,
    settings: EngineSettings,
) -> PluginServices:
    return PluginServices(http=http, source=source, runner=runner, settings=settings, reporter=Reporter.silent())


@pytest.fixture
def make_tar() -> Callable[..., Path]:
    return build_tar


@pytest.fixture
def make_zip() -> Callable[..., Path]:
    return build_zip


@pytest.fixture
def make_gz() -> Callable[..., Path]:
    return build_gz


@pytest.fixture
def make_source() -> Callable[..., FakeSource]:
    return FakeSource


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner
