# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Drive plugins through resolve, download, verify and install for whole batches."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final, TypeVar

from .checksums import ToolSums, record_tool_sum, verify_tool_sum
from .context import OperationContext
from .errors import DependencyCycleError, InstallError, OperationCancelledError
from .plugins.base import Plugin
from .plugins.registry import PluginRegistry
from .reporting import Reporter
from .settings import EngineSettings
from .tool_versions import parse_tool_versions

LOGGER = logging.getLogger(__name__)

LATEST: Final[str] = "latest"
LATEST_PREFIX: Final[str] = "latest:"

_T = TypeVar("_T")


class InstallStage(str, Enum):
    """Named steps reported in :class:`InstallError`."""

    RESOLVE = "resolve"
    DEPENDENCIES = "dependencies"
    DOWNLOAD = "download"
    CHECKSUM = "checksum"
    INSTALL = "install"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Outcome of installing one tool and, first, its dependencies."""

    tool: str
    version: str
    install_path: Path
    download_path: Path
    checksum_verified: bool = False
    dependencies: tuple[InstallResult, ...] = ()


class ToolInstaller:
    """Install tools from a :class:`PluginRegistry` into the settings' data directory.

    Layout: ``<data_dir>/downloads/<tool>/<version>`` receives artifacts and
    ``<data_dir>/installs/<tool>/<version>`` receives the installation. Every
    failing step is re-raised as :class:`InstallError` naming the stage.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        settings: EngineSettings,
        *,
        reporter: Reporter | None = None,
        tool_versions_path: Path | None = None,
    ) -> None:
        """Bind the installer to its plugins and settings.

        Args:
            registry: Plugins that can be installed.
            settings: Engine settings.
            reporter: Progress sink; defaults to one built from ``settings``.
            tool_versions_path: Project ``.tool-versions`` pinning dependency versions.
        """

        self._registry = registry
        self._settings = settings
        self._reporter = reporter or Reporter(
            quiet=settings.quiet,
            use_color=settings.use_color,
            use_emoji=settings.use_emoji,
        )
        self._tool_versions_path = tool_versions_path

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    def resolve_version(self, ctx: OperationContext, plugin: Plugin, query: str = LATEST) -> str:
        """Turn a user query into a concrete version.

        ``""`` and ``latest`` pick the latest stable version, ``latest:<prefix>``
        the latest stable version starting with ``prefix``; anything else is
        taken as an exact version.
        """

        requested = query.strip()
        if requested in {"", LATEST}:
            return plugin.latest_stable(ctx, "")
        if requested.startswith(LATEST_PREFIX):
            return plugin.latest_stable(ctx, requested[len(LATEST_PREFIX) :])
        return requested

    def install(self, ctx: OperationContext, name: str, query: str = LATEST) -> InstallResult:
        """Install ``name`` after its declared dependencies.

        Raises:
            UnknownPluginError: If ``name`` or a dependency is not registered.
            DependencyCycleError: If dependencies refer back to a tool in progress.
            InstallError: If any stage fails.
        """

        return self._install(ctx, name, query, stack=(), done={})

    def install_many(
        self,
        ctx: OperationContext,
        requests: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> list[InstallResult]:
        """Install several tools one after another, stopping at the first failure."""

        pairs = list(requests.items()) if isinstance(requests, Mapping) else list(requests)
        done: dict[str, InstallResult] = {}
        results: list[InstallResult] = []
        for name, query in pairs:
            results.append(self._install(ctx, name, query, stack=(), done=done))
        return results

    def uninstall(self, ctx: OperationContext, name: str, version: str) -> Path:
        """Remove the installation of ``name`` at ``version`` and return its path."""

        plugin = self._registry.get(name)
        install_path = self._settings.install_path(name, version)
        plugin.uninstall(ctx, install_path)
        self._reporter.ok(f"{name} {version} uninstalled")
        return install_path

    def _pinned_version(self, name: str) -> str:
        if self._tool_versions_path is None:
            return LATEST
        return parse_tool_versions(self._tool_versions_path).get(name, LATEST)

    def _stage(self, name: str, stage: InstallStage, version: str | None, action: Callable[[], _T]) -> _T:
        try:
            return action()
        except (OperationCancelledError, DependencyCycleError):
            raise
        except Exception as exc:
            self._reporter.fail(f"{stage.value} failed for {name}: {exc}")
            raise InstallError(name, stage.value, version) from exc

    def _install(
        self,
        ctx: OperationContext,
        name: str,
        query: str,
        *,
        stack: tuple[str, ...],
        done: dict[str, InstallResult],
    ) -> InstallResult:
        if name in stack:
            raise DependencyCycleError(f"dependency cycle: {' -> '.join((*stack, name))}")
        if name in done:
            return done[name]
        plugin = self._registry.get(name)

        dependencies: list[InstallResult] = []
        for dependency in plugin.dependencies():
            dependencies.append(
                self._stage(
                    name,
                    InstallStage.DEPENDENCIES,
                    None,
                    lambda dep=dependency: self._install(
                        ctx,
                        dep,
                        self._pinned_version(dep),
                        stack=(*stack, name),
                        done=done,
                    ),
                ),
            )

        version = self._stage(name, InstallStage.RESOLVE, None, lambda: self.resolve_version(ctx, plugin, query))
        download_path = self._settings.download_path(name, version)
        install_path = self._settings.install_path(name, version)
        self._reporter.section(f"{name} {version}")

        self._stage(name, InstallStage.DOWNLOAD, version, lambda: plugin.download(ctx, version, download_path))
        verified = False
        if self._settings.verify_checksums:
            verified = self._stage(
                name,
                InstallStage.CHECKSUM,
                version,
                lambda: self._verify_checksums(ctx, plugin, version, download_path),
            )
        self._stage(
            name,
            InstallStage.INSTALL,
            version,
            lambda: plugin.install(ctx, version, download_path, install_path),
        )

        result = InstallResult(
            tool=name,
            version=version,
            install_path=install_path,
            download_path=download_path,
            checksum_verified=verified,
            dependencies=tuple(dependencies),
        )
        done[name] = result
        return result

    def _verify_checksums(self, ctx: OperationContext, plugin: Plugin, version: str, download_path: Path) -> bool:
        verified = plugin.verify_companion_checksum(ctx, version, download_path)
        if not download_path.is_dir():
            return verified
        ledger = ToolSums.load(self._settings.tool_sums_path)
        if verify_tool_sum(ledger, plugin.name, version, download_path):
            return True
        try:
            record_tool_sum(ledger, plugin.name, version, download_path)
        except OSError as exc:
            LOGGER.warning("could not record checksum for %s %s: %s", plugin.name, version, exc)
            self._reporter.warn(f"could not record checksum for {plugin.name} {version}: {exc}")
        return verified


__all__ = ["InstallResult", "InstallStage", "ToolInstaller"]
