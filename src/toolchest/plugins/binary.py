# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install a tool from a single prebuilt release artifact."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..archives.extract import extract_archive, extract_gz, flatten_single_directory
from ..archives.kinds import ArchiveKind
from ..context import OperationContext
from ..download import download_file, is_cached
from ..errors import BinaryNotFoundError
from ..fsutils import EXECUTABLE_MODE, ensure_dir, make_executable, replace_contents
from ..host import host_platform
from ..locator import ArtifactDescriptor, ArtifactTemplate
from .base import Plugin, PluginServices
from .config import BinaryPluginConfig

LOGGER = logging.getLogger(__name__)

STAGING_PREFIX = ".extract-"


class BinaryPlugin(Plugin):
    """Download one artifact per platform and unpack it into the install root.

    Archives are unpacked into a staging directory inside the install root,
    optionally stripped of a lone wrapper directory, then moved over the
    install root entry by entry so a re-install overwrites rather than
    merges. The tool binary always ends up at ``<bin_dir>/<binary_name>``.
    """

    def __init__(self, config: BinaryPluginConfig, services: PluginServices) -> None:
        super().__init__(config, services)
        self._binary_config = config

    def artifact_template(self) -> ArtifactTemplate:
        cfg = self._binary_config
        extra = cfg.template_values("")
        extra.pop("Version")
        return ArtifactTemplate(
            repo_owner=cfg.repo_owner,
            repo_name=cfg.repo_name,
            file_name_template=cfg.file_name_template,
            download_url_template=cfg.download_url_template,
            os_map=cfg.os_map,
            arch_map=cfg.arch_map,
            unsupported_platforms=cfg.unsupported_platforms,
            archive_kind=cfg.archive_kind,
            extra=extra,
        )

    def locate(self, version: str) -> ArtifactDescriptor:
        """Return the artifact matching this host for ``version``.

        Raises:
            UnsupportedPlatformError: If the tool marks the host unsupported.
            TemplateRenderError: If a template placeholder has no value.
        """

        os_name, arch = host_platform(self._services.settings.arch_override)
        return self.artifact_template().locate(version, os_name, arch)

    def artifact_path(self, version: str, download_path: Path) -> Path:
        return download_path / self.locate(version).file_name

    def expected_artifacts(self) -> tuple[str, ...]:
        declared = self._binary_config.expected_artifacts
        if declared:
            return declared
        return (self._binary_relative_path(),)

    def _binary_relative_path(self) -> str:
        bin_dir = self._binary_config.bin_dir.strip("/")
        name = self._binary_config.effective_binary_name
        return name if bin_dir in {"", "."} else f"{bin_dir}/{name}"

    def download(self, ctx: OperationContext, version: str, download_path: Path) -> Path:
        """Fetch the artifact unless a plausible copy is already cached.

        Raises:
            DownloadFailedError: If the server refuses the request.
            TransportError: If the transfer fails.
        """

        settings = self._services.settings
        artifact = self.locate(version)
        dest = download_path / artifact.file_name
        if is_cached(dest, settings.min_download_size):
            self.reporter.info(f"Using cached download for {self.name} {version}")
            return dest
        self.reporter.info(f"Downloading {self.name} {version} from {artifact.url}")
        download_file(ctx, self._services.http, artifact.url, dest, timeout=settings.download_timeout)
        if artifact.archive_kind is ArchiveKind.NONE:
            make_executable(dest)
        return dest

    def install(self, ctx: OperationContext, version: str, download_path: Path, install_path: Path) -> None:
        """Unpack the downloaded artifact into ``install_path``.

        Raises:
            BinaryNotFoundError: If the archive holds no file named like the binary.
            ExpectedArtifactMissingError: If a declared artifact is absent afterwards.
            InvalidFilePathError: If an archive entry escapes the install root.
            ArchiveTooLargeError: If the archive exceeds the size ceilings.
        """

        artifact = self.locate(version)
        archive = download_path / artifact.file_name
        if not archive.is_file():
            self.download(ctx, version, download_path)

        self.reporter.info(f"Installing {self.name} {version} to {install_path}")
        ensure_dir(install_path)
        target = install_path / self._binary_relative_path()
        limits = self._services.settings.archive_limits

        if artifact.archive_kind is ArchiveKind.NONE:
            self._copy_into_place(archive, target)
        elif artifact.archive_kind is ArchiveKind.GZ:
            extract_gz(archive, target, limits=limits, ctx=ctx)
        else:
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=install_path))
            extract_archive(archive, staging, artifact.archive_kind, limits=limits, ctx=ctx)
            staged_binary = staging / self._binary_relative_path()
            # A tree already holding <bin_dir>/<binary> is laid out correctly.
            if self._binary_config.flatten_single_directory and not staged_binary.is_file():
                wrapper = flatten_single_directory(staging)
                if wrapper:
                    LOGGER.debug("flattened wrapper directory %s", wrapper)
            if not staged_binary.is_file():
                self._copy_into_place(self._find_binary(staging), staged_binary)
            replace_contents(staging, install_path)
            staging.rmdir()
        target.chmod(EXECUTABLE_MODE)

        if self._binary_config.post_install is not None:
            self._binary_config.post_install(self._hook_context(ctx, version, download_path, install_path))
        self.verify_expected_artifacts(install_path, make_bin_executable=True)
        self.reporter.ok(f"{self.name} {version} installed successfully")

    def _find_binary(self, root: Path) -> Path:
        wanted = self._binary_config.effective_binary_name
        for current, dirs, files in os.walk(root):
            dirs.sort()
            if wanted in files:
                return Path(current) / wanted
        raise BinaryNotFoundError(f"binary not found in archive: {wanted}")

    @staticmethod
    def _copy_into_place(source: Path, target: Path) -> None:
        ensure_dir(target.parent)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        os.close(fd)
        shutil.copyfile(source, tmp_name)
        os.replace(tmp_name, target)


__all__ = ["BinaryPlugin"]
