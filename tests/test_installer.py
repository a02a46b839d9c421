# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the batch installer driving plugins end to end."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from toolchest.checksums import ToolSums
from toolchest.context import OperationContext
from toolchest.errors import (
    ChecksumMismatchError,
    DependencyCycleError,
    DownloadFailedError,
    InstallError,
    NoVersionsMatchingError,
    OperationCancelledError,
    UnknownPluginError,
)
from toolchest.installer import InstallStage, ToolInstaller
from toolchest.plugins import Plugin, PluginConfig, PluginRegistry, PluginServices


class _RecordingPlugin(Plugin):
    """Plugin writing a marker artifact and logging every lifecycle call."""

    def __init__(self, config: PluginConfig, services: PluginServices, events: list[str], payload: bytes = b"x") -> None:
        super().__init__(config, services)
        self.events = events
        self.payload = payload
        self.download_error: Exception | None = None

    def artifact_path(self, version: str, download_path: Path) -> Path:
        return download_path / f"{self.name}-{version}.tar.gz"

    def download(self, ctx: OperationContext, version: str, download_path: Path) -> Path:
        self.events.append(f"download {self.name} {version}")
        if self.download_error is not None:
            raise self.download_error
        download_path.mkdir(parents=True, exist_ok=True)
        artifact = self.artifact_path(version, download_path)
        artifact.write_bytes(self.payload)
        return artifact

    def install(self, ctx: OperationContext, version: str, download_path: Path, install_path: Path) -> None:
        self.events.append(f"install {self.name} {version}")
        install_path.mkdir(parents=True, exist_ok=True)
        (install_path / "installed").write_text(version)


def _plugin(services, events, name: str, **overrides) -> _RecordingPlugin:
    return _RecordingPlugin(PluginConfig(name=name, repo_owner="acme", repo_name=name, **overrides), services, events)


@pytest.fixture
def events() -> list[str]:
    return []


def test_install_resolves_latest_stable(ctx, services, source, settings, events) -> None:
    source.releases = ["v1.0.0", "v1.1.0", "v2.0.0-rc1"]
    installer = ToolInstaller(PluginRegistry([_plugin(services, events, "widget")]), settings)

    result = installer.install(ctx, "widget")

    assert result.version == "1.1.0"
    assert result.install_path == settings.install_path("widget", "1.1.0")
    assert result.download_path == settings.download_path("widget", "1.1.0")
    assert (result.install_path / "installed").read_text() == "1.1.0"
    assert events == ["download widget 1.1.0", "install widget 1.1.0"]


@pytest.mark.parametrize(
    ("query", "expected"),
    [("", "1.10.0"), ("latest", "1.10.0"), ("latest:1.9", "1.9.2"), (" 1.2.3 ", "1.2.3")],
)
def test_resolve_version_queries(ctx, services, source, settings, events, query: str, expected: str) -> None:
    source.releases = ["v1.9.2", "v1.10.0"]
    plugin = _plugin(services, events, "widget")
    installer = ToolInstaller(PluginRegistry([plugin]), settings)

    assert installer.resolve_version(ctx, plugin, query) == expected


def test_resolve_failure_is_wrapped(ctx, services, source, settings, events) -> None:
    source.releases = ["v1.0.0"]
    installer = ToolInstaller(PluginRegistry([_plugin(services, events, "widget")]), settings)

    with pytest.raises(InstallError) as excinfo:
        installer.install(ctx, "widget", "latest:9")

    assert excinfo.value.stage == InstallStage.RESOLVE.value
    assert isinstance(excinfo.value.__cause__, NoVersionsMatchingError)
    assert events == []


def test_download_failure_names_stage_and_version(ctx, services, settings, events) -> None:
    plugin = _plugin(services, events, "widget")
    plugin.download_error = DownloadFailedError("https://example.invalid/w.tar.gz", 404)
    installer = ToolInstaller(PluginRegistry([plugin]), settings)

    with pytest.raises(InstallError) as excinfo:
        installer.install(ctx, "widget", "1.0.0")

    assert excinfo.value.stage == "download"
    assert excinfo.value.version == "1.0.0"
    assert str(excinfo.value).startswith("download failed for widget 1.0.0: download failed with status 404")
    assert events == ["download widget 1.0.0"]


def test_dependencies_install_first_using_pins(ctx, services, source, settings, events, tmp_path: Path) -> None:
    source.releases = ["v3.0.0"]
    pins = tmp_path / ".tool-versions"
    pins.write_text("golang 1.22.1\n", encoding="utf-8")
    registry = PluginRegistry(
        [
            _plugin(services, events, "app", dependencies=("golang",)),
            _plugin(services, events, "golang"),
        ],
    )
    installer = ToolInstaller(registry, settings, tool_versions_path=pins)

    result = installer.install(ctx, "app", "2.0.0")

    assert events == [
        "download golang 1.22.1",
        "install golang 1.22.1",
        "download app 2.0.0",
        "install app 2.0.0",
    ]
    assert [dep.tool for dep in result.dependencies] == ["golang"]
    assert result.dependencies[0].version == "1.22.1"


def test_shared_dependency_installs_once(ctx, services, settings, events, tmp_path: Path) -> None:
    pins = tmp_path / ".tool-versions"
    pins.write_text("lib 1.0.0\n", encoding="utf-8")
    registry = PluginRegistry(
        [
            _plugin(services, events, "one", dependencies=("lib",)),
            _plugin(services, events, "two", dependencies=("lib",)),
            _plugin(services, events, "lib"),
        ],
    )
    installer = ToolInstaller(registry, settings, tool_versions_path=pins)

    results = installer.install_many(ctx, {"one": "1.0.0", "two": "2.0.0"})

    assert [result.tool for result in results] == ["one", "two"]
    assert events.count("install lib 1.0.0") == 1


def test_dependency_cycle_is_reported(ctx, services, settings, events) -> None:
    registry = PluginRegistry(
        [
            _plugin(services, events, "a", dependencies=("b",)),
            _plugin(services, events, "b", dependencies=("a",)),
        ],
    )

    with pytest.raises(DependencyCycleError, match="dependency cycle: a -> b -> a"):
        ToolInstaller(registry, settings).install(ctx, "a", "1.0.0")
    assert events == []


def test_unknown_dependency_is_wrapped(ctx, services, settings, events) -> None:
    registry = PluginRegistry([_plugin(services, events, "app", dependencies=("missing",))])

    with pytest.raises(InstallError) as excinfo:
        ToolInstaller(registry, settings).install(ctx, "app", "1.0.0")

    assert excinfo.value.stage == "dependencies"
    assert isinstance(excinfo.value.__cause__, UnknownPluginError)


def test_cancellation_is_not_wrapped(services, settings, events) -> None:
    ctx = OperationContext()
    ctx.cancel()
    plugin = _plugin(services, events, "widget")
    plugin.download_error = OperationCancelledError("operation cancelled")

    with pytest.raises(OperationCancelledError):
        ToolInstaller(PluginRegistry([plugin]), settings).install(ctx, "widget", "1.0.0")


def test_checksum_ledger_records_then_verifies(ctx, services, settings, events) -> None:
    checked = settings.model_copy(update={"verify_checksums": True})
    checked_services = replace(services, settings=checked)
    plugin = _plugin(checked_services, events, "widget")
    installer = ToolInstaller(PluginRegistry([plugin]), checked)

    first = installer.install(ctx, "widget", "1.0.0")
    assert not first.checksum_verified
    assert ToolSums.load(checked.tool_sums_path).get("widget", "1.0.0") is not None

    second = installer.install(ctx, "widget", "1.0.0")
    assert second.checksum_verified

    plugin.payload = b"tampered"
    with pytest.raises(InstallError) as excinfo:
        installer.install(ctx, "widget", "1.0.0")
    assert excinfo.value.stage == "checksum"
    assert isinstance(excinfo.value.__cause__, ChecksumMismatchError)


def test_uninstall_removes_install_path(ctx, services, settings, events) -> None:
    installer = ToolInstaller(PluginRegistry([_plugin(services, events, "widget")]), settings)
    installed = installer.install(ctx, "widget", "1.0.0")

    removed = installer.uninstall(ctx, "widget", "1.0.0")

    assert removed == installed.install_path
    assert not removed.exists()
