# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install a tool by building it from a source archive or git checkout."""

from __future__ import annotations

import logging
from pathlib import Path

from ..archives.extract import extract_archive
from ..archives.kinds import ArchiveKind
from ..context import OperationContext
from ..download import download_file, is_cached
from ..errors import (
    BuildStepMissingError,
    ExtractedDirectoryMissingError,
    SourceArchiveMissingError,
    UnsupportedArchiveKindError,
)
from ..fsutils import ensure_dir, remove_path
from ..locator import render_template
from ..vcs import ensure_git_repo
from .base import Plugin, PluginServices
from .config import SourceBuildPluginConfig

LOGGER = logging.getLogger(__name__)

SOURCE_DIR_NAME = "src"


class SourceBuildPlugin(Plugin):
    """Fetch a source tree and hand it to tool-supplied build hooks.

    Install runs ``pre_build``, ``build`` and ``post_install`` in that order
    and then checks the expected artifacts. When every expected artifact is
    already present the install is a no-op.
    """

    def __init__(self, config: SourceBuildPluginConfig, services: PluginServices) -> None:
        super().__init__(config, services)
        self._source_config = config

    def _render(self, template: str, version: str) -> str:
        return render_template(template, self.template_values(version))

    def archive_name(self, version: str) -> str:
        return self._render(self._source_config.archive_name_template, version)

    def artifact_path(self, version: str, download_path: Path) -> Path | None:
        if self._source_config.git_url_template or self._source_config.skip_download:
            return None
        return download_path / self.archive_name(version)

    def source_url(self, ctx: OperationContext, version: str) -> str:
        """Return the source archive URL, preferring the configured resolver."""

        resolver = self._source_config.source_url_resolver
        if resolver is not None:
            return resolver(ctx, version)
        return self._render(self._source_config.source_url_template, version)

    def checkout_path(self, download_path: Path) -> Path:
        return download_path / SOURCE_DIR_NAME / (self._source_config.repo_name or self.name)

    def download(self, ctx: OperationContext, version: str, download_path: Path) -> Path | None:
        """Fetch the source archive or refresh the git checkout.

        Returns:
            Path | None: The archive or checkout, or ``None`` when downloads are skipped.
        """

        cfg = self._source_config
        ensure_dir(download_path)
        if cfg.git_url_template:
            checkout = self.checkout_path(download_path)
            git_url = self._render(cfg.git_url_template, version)
            self.reporter.info(f"Fetching {self.name} {version} source from {git_url}")
            ensure_git_repo(
                ctx,
                self._services.runner,
                checkout,
                git_url,
                ref=f"{cfg.version_prefix}{version}",
            )
            return checkout
        if cfg.skip_download:
            return None
        archive = download_path / self.archive_name(version)
        if is_cached(archive, cfg.min_archive_size):
            LOGGER.debug("using cached source archive %s", archive)
            return archive
        url = self.source_url(ctx, version)
        self.reporter.info(f"Downloading {self.name} {version} source from {url}")
        download_file(ctx, self._services.http, url, archive, timeout=self._services.settings.download_timeout)
        return archive

    def install(self, ctx: OperationContext, version: str, download_path: Path, install_path: Path) -> None:
        """Build ``version`` into ``install_path``.

        Raises:
            BuildStepMissingError: If no build hook is configured.
            SourceArchiveMissingError: If the archive is absent before extraction.
            ExtractedDirectoryMissingError: If the extracted tree is not where expected.
            ExpectedArtifactMissingError: If the build did not produce a declared artifact.
        """

        cfg = self._source_config
        if cfg.build is None:
            raise BuildStepMissingError(f"no build step configured for {self.name}")

        ensure_dir(install_path)
        if cfg.create_bin_dir and cfg.bin_dir.strip("/") not in {"", "."}:
            ensure_dir(install_path / cfg.bin_dir)

        if self.all_artifacts_present(install_path):
            self.verify_expected_artifacts(install_path, make_bin_executable=True)
            self.reporter.info(f"{self.name} {version} is already installed")
            return

        fetched = self.download(ctx, version, download_path)
        if cfg.git_url_template:
            source_dir = fetched or self.checkout_path(download_path)
        elif cfg.skip_extract:
            source_dir = download_path
        else:
            source_dir = self._extract_source(ctx, version, download_path)

        self.reporter.info(f"Building {self.name} {version}")
        hook_ctx = self._hook_context(ctx, version, download_path, install_path, source_dir)
        if cfg.pre_build is not None:
            cfg.pre_build(hook_ctx)
        ctx.check()
        cfg.build(hook_ctx)
        if cfg.post_install is not None:
            cfg.post_install(hook_ctx)

        self.verify_expected_artifacts(install_path, make_bin_executable=True)
        self.reporter.ok(f"{self.name} {version} installed successfully")

    def _extract_source(self, ctx: OperationContext, version: str, download_path: Path) -> Path:
        cfg = self._source_config
        archive = download_path / self.archive_name(version)
        if not archive.is_file():
            raise SourceArchiveMissingError(f"source archive missing: {archive}")
        if cfg.archive_kind in {ArchiveKind.NONE, ArchiveKind.GZ}:
            raise UnsupportedArchiveKindError(f"unsupported source archive type: {cfg.archive_kind.value}")

        src_root = download_path / SOURCE_DIR_NAME
        remove_path(src_root)
        ensure_dir(src_root)
        extract_archive(archive, src_root, cfg.archive_kind, limits=self._services.settings.archive_limits, ctx=ctx)

        candidate = src_root / self._render(cfg.extracted_dir_template, version)
        if cfg.auto_detect_extracted_dir:
            directories = sorted(entry for entry in src_root.iterdir() if entry.is_dir())
            if directories:
                candidate = directories[0]
        if not candidate.is_dir():
            raise ExtractedDirectoryMissingError(f"extracted source directory missing: {candidate}")
        return candidate


__all__ = ["SourceBuildPlugin"]
