# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Toolchain version manager engine: resolve, fetch and install third-party tools."""

from __future__ import annotations

from .archives import ArchiveKind, ArchiveLimits, extract_archive
from .context import OperationContext
from .errors import (
    ArchiveTooLargeError,
    ChecksumMismatchError,
    ConfigError,
    DownloadFailedError,
    ExpectedArtifactMissingError,
    InstallError,
    InvalidArchiveLimitsError,
    InvalidFilePathError,
    NoVersionsFoundError,
    NoVersionsMatchingError,
    ToolchestError,
    TransportError,
    UnsupportedPlatformError,
)
from .installer import InstallResult, ToolInstaller
from .locator import ArtifactDescriptor, ArtifactTemplate, normalize_platform, render_download_url, render_file_name
from .plugins import (
    BinaryPlugin,
    BinaryPluginConfig,
    HookContext,
    Plugin,
    PluginHelp,
    PluginRegistry,
    PluginServices,
    SourceBuildPlugin,
    SourceBuildPluginConfig,
)
from .settings import EngineSettings
from .versioning import compare_versions, filter_stable, resolve_latest_matching, sort_versions

__all__ = [
    "ArchiveKind",
    "ArchiveLimits",
    "ArchiveTooLargeError",
    "ArtifactDescriptor",
    "ArtifactTemplate",
    "BinaryPlugin",
    "BinaryPluginConfig",
    "ChecksumMismatchError",
    "ConfigError",
    "DownloadFailedError",
    "EngineSettings",
    "ExpectedArtifactMissingError",
    "HookContext",
    "InstallError",
    "InstallResult",
    "InvalidArchiveLimitsError",
    "InvalidFilePathError",
    "NoVersionsFoundError",
    "NoVersionsMatchingError",
    "OperationContext",
    "Plugin",
    "PluginHelp",
    "PluginRegistry",
    "PluginServices",
    "SourceBuildPlugin",
    "SourceBuildPluginConfig",
    "ToolInstaller",
    "ToolchestError",
    "TransportError",
    "UnsupportedPlatformError",
    "compare_versions",
    "extract_archive",
    "filter_stable",
    "normalize_platform",
    "render_download_url",
    "render_file_name",
    "resolve_latest_matching",
    "sort_versions",
]
