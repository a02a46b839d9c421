# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Uniform plugin lifecycle shared by the binary and source-build strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..checksums import parse_checksum_text, verify_sha256
from ..context import OperationContext
from ..download import download_text
from ..errors import ExpectedArtifactMissingError
from ..fsutils import EXECUTABLE_MODE, remove_path
from ..interfaces.http import HttpClient
from ..interfaces.process import CommandRunner
from ..interfaces.sources import ReleaseSource
from ..locator import render_template
from ..process_utils import SubprocessRunner
from ..reporting import Reporter
from ..settings import EngineSettings
from ..sources.github import GitHubReleaseSource
from ..transport import RequestsHttpClient
from ..versioning.listing import list_versions
from ..versioning.model import resolve_latest_matching
from .config import HookContext, PluginConfig, PluginHelp

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PluginServices:
    """Collaborators injected into every plugin."""

    http: HttpClient
    source: ReleaseSource
    runner: CommandRunner
    settings: EngineSettings
    reporter: Reporter

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> PluginServices:
        """Wire the production collaborators described by ``settings``."""

        http = RequestsHttpClient()
        return cls(
            http=http,
            source=GitHubReleaseSource(
                http,
                api_url=settings.github_api_url,
                token=settings.github_token,
                timeout=settings.api_timeout,
            ),
            runner=SubprocessRunner(),
            settings=settings,
            reporter=Reporter(quiet=settings.quiet, use_color=settings.use_color, use_emoji=settings.use_emoji),
        )


class Plugin(ABC):
    """Strategy object installing one tool.

    Lifecycle state lives only on disk: a missing install path means the tool
    is absent, an install path holding every expected artifact means it is
    installed. Concrete strategies implement :meth:`download` and
    :meth:`install`; everything else is shared.
    """

    def __init__(self, config: PluginConfig, services: PluginServices) -> None:
        self._config = config
        self._services = services

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> PluginConfig:
        return self._config

    @property
    def reporter(self) -> Reporter:
        return self._services.reporter

    def list_all(self, ctx: OperationContext) -> list[str]:
        """Return every known version, ascending, stable versions preferred."""

        return list_versions(self._services.source, self._config.listing(), ctx)

    def latest_stable(self, ctx: OperationContext, query: str = "") -> str:
        """Return the greatest stable version starting with ``query``.

        Raises:
            NoVersionsFoundError: If the tool lists no versions.
            NoVersionsMatchingError: If nothing starts with ``query``.
        """

        return resolve_latest_matching(
            self.list_all(ctx),
            query,
            prerelease_pattern=self._config.listing().compiled_prerelease(),
        )

    @abstractmethod
    def download(self, ctx: OperationContext, version: str, download_path: Path) -> Path | None:
        """Fetch the artifact for ``version`` into ``download_path``.

        Returns:
            Path | None: Fetched artifact, or ``None`` when nothing is downloaded.
        """

        raise NotImplementedError

    @abstractmethod
    def install(self, ctx: OperationContext, version: str, download_path: Path, install_path: Path) -> None:
        """Materialise ``version`` under ``install_path``; safe to re-run."""

        raise NotImplementedError

    @abstractmethod
    def artifact_path(self, version: str, download_path: Path) -> Path | None:
        """Return where :meth:`download` stores the artifact for ``version``."""

        raise NotImplementedError

    def uninstall(self, ctx: OperationContext, install_path: Path) -> None:
        """Remove ``install_path`` recursively; an absent path is fine."""

        ctx.check()
        remove_path(install_path)
        LOGGER.debug("removed %s", install_path)

    def verify_expected_artifacts(self, install_path: Path, *, make_bin_executable: bool = False) -> None:
        """Confirm every declared artifact exists below ``install_path``.

        Args:
            install_path: Install root.
            make_bin_executable: Also mark artifacts below the bin directory executable.

        Raises:
            ExpectedArtifactMissingError: Naming the first missing relative path.
        """

        for relative in self.expected_artifacts():
            path = install_path / relative
            if not path.exists():
                raise ExpectedArtifactMissingError(relative, install_path)
            if make_bin_executable and self._in_bin_dir(relative) and path.is_file():
                path.chmod(EXECUTABLE_MODE)

    def expected_artifacts(self) -> tuple[str, ...]:
        return self._config.expected_artifacts

    def _in_bin_dir(self, relative: str) -> bool:
        bin_dir = self._config.bin_dir.strip("/")
        if bin_dir in {"", "."}:
            return "/" not in relative.strip("/")
        return relative.strip("/").startswith(f"{bin_dir}/")

    def all_artifacts_present(self, install_path: Path) -> bool:
        expected = self.expected_artifacts()
        return bool(expected) and all((install_path / relative).exists() for relative in expected)

    def verify_companion_checksum(self, ctx: OperationContext, version: str, download_path: Path) -> bool:
        """Compare the artifact against the tool's published checksum file.

        Returns:
            bool: ``False`` when the tool publishes no checksum or nothing was
            downloaded, ``True`` after a successful comparison.

        Raises:
            ChecksumMismatchError: If the digests differ.
        """

        template = self._config.checksum_url_template
        artifact = self.artifact_path(version, download_path)
        if not template or artifact is None or not artifact.is_file():
            return False
        values = self.template_values(version)
        values["FileName"] = artifact.name
        url = render_template(template, values)
        text = download_text(ctx, self._services.http, url, timeout=self._services.settings.api_timeout)
        verify_sha256(artifact, parse_checksum_text(text, artifact.name))
        LOGGER.debug("companion checksum verified for %s %s", self.name, version)
        return True

    def template_values(self, version: str) -> dict[str, str]:
        return self._config.template_values(version)

    def list_bin_paths(self) -> list[str]:
        return [self._config.bin_dir]

    def exec_env(self, install_path: Path) -> dict[str, str]:
        """Return environment variables to export when running the tool.

        ``{install_path}`` inside a configured value expands to the install root.
        """

        return {key: value.replace("{install_path}", str(install_path)) for key, value in self._config.exec_env.items()}

    def legacy_filenames(self) -> list[str]:
        return list(self._config.legacy_filenames)

    def parse_legacy_file(self, path: Path) -> str:
        """Return the version written in a legacy version file."""

        return path.read_text(encoding="utf-8").strip()

    def dependencies(self) -> tuple[str, ...]:
        return self._config.dependencies

    def help(self) -> PluginHelp:
        if self._config.help is not None:
            return self._config.help
        overview = self.name
        if self._config.help_description:
            overview = f"{self.name} - {self._config.help_description}"
        links = f"GitHub: https://github.com/{self._config.repo_owner}/{self._config.repo_name}"
        if self._config.help_link:
            links = f"Documentation: {self._config.help_link}\n{links}"
        return PluginHelp(overview=overview, links=links)

    def _hook_context(
        self,
        ctx: OperationContext,
        version: str,
        download_path: Path,
        install_path: Path,
        source_dir: Path | None = None,
    ) -> HookContext:
        return HookContext(
            ctx=ctx,
            plugin_name=self.name,
            version=version,
            install_path=install_path,
            download_path=download_path,
            runner=self._services.runner,
            reporter=self._services.reporter,
            source_dir=source_dir,
            env=self.exec_env(install_path),
        )


__all__ = ["Plugin", "PluginServices"]
