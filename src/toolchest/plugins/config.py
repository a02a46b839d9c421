# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable per-tool configuration consumed by the plugin strategies."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..archives.kinds import ArchiveKind
from ..context import OperationContext
from ..errors import UnsupportedArchiveKindError
from ..interfaces.process import CommandRunner
from ..reporting import Reporter
from ..versioning.listing import VersionListing

DEFAULT_BIN_DIR: Final[str] = "bin"
DEFAULT_VERSION_PREFIX: Final[str] = "v"
DEFAULT_FILE_NAME_TEMPLATE: Final[str] = "{{.BinaryName}}-{{.Platform}}-{{.Arch}}"
DEFAULT_DOWNLOAD_URL_TEMPLATE: Final[str] = (
    "https://github.com/{{.RepoOwner}}/{{.RepoName}}/releases/download/{{.VersionPrefix}}{{.Version}}/{{.FileName}}"
)
DEFAULT_SOURCE_URL_TEMPLATE: Final[str] = (
    "https://github.com/{{.RepoOwner}}/{{.RepoName}}/archive/refs/tags/{{.VersionPrefix}}{{.Version}}.tar.gz"
)
DEFAULT_ARCHIVE_NAME_TEMPLATE: Final[str] = "{{.RepoName}}-{{.Version}}.{{.ArchiveExt}}"
DEFAULT_EXTRACTED_DIR_TEMPLATE: Final[str] = "{{.RepoName}}-{{.Version}}"
DEFAULT_MIN_ARCHIVE_SIZE: Final[int] = 1024


@dataclass(frozen=True, slots=True)
class HookContext:
    """Arguments handed to tool-supplied build and post-install hooks."""

    ctx: OperationContext
    plugin_name: str
    version: str
    install_path: Path
    download_path: Path
    runner: CommandRunner
    reporter: Reporter
    source_dir: Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)


BuildHook = Callable[[HookContext], None]
SourceURLResolver = Callable[[OperationContext, str], str]


@dataclass(frozen=True, slots=True)
class PluginHelp:
    """Human-readable documentation for a plugin."""

    overview: str
    deps: str = "No additional dependencies required"
    config: str = "No additional configuration required"
    links: str = ""


class PluginConfig(BaseModel):
    """Fields shared by every plugin strategy."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    repo_owner: str = ""
    repo_name: str = ""
    repo_url: str | None = None
    version_prefix: str = DEFAULT_VERSION_PREFIX
    version_filter: str | None = None
    prerelease_pattern: str | None = None
    use_tags: bool = False
    os_map: dict[str, str] = Field(default_factory=dict)
    arch_map: dict[str, str] = Field(default_factory=dict)
    unsupported_platforms: frozenset[str] = frozenset()
    bin_dir: str = DEFAULT_BIN_DIR
    expected_artifacts: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    legacy_filenames: tuple[str, ...] = ()
    exec_env: dict[str, str] = Field(default_factory=dict)
    checksum_url_template: str | None = None
    help_description: str = ""
    help_link: str = ""
    help: PluginHelp | None = None
    post_install: BuildHook | None = None

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("plugin name must not be empty")
        return value.strip()

    @field_validator("version_filter", "prerelease_pattern")
    @classmethod
    def _require_regex(cls, value: str | None) -> str | None:
        if value:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value or None

    @property
    def resolved_repo_url(self) -> str:
        """Return ``repo_url`` or the GitHub URL built from owner and name."""

        if self.repo_url:
            return self.repo_url
        return f"https://github.com/{self.repo_owner}/{self.repo_name}"

    def listing(self) -> VersionListing:
        """Return the version-listing rules for this tool."""

        return VersionListing(
            repo_url=self.resolved_repo_url,
            version_prefix=self.version_prefix,
            version_filter=self.version_filter,
            prerelease_pattern=self.prerelease_pattern,
            use_tags=self.use_tags,
        )

    def template_values(self, version: str) -> dict[str, str]:
        """Return the placeholder values every template of this tool may use."""

        return {
            "Name": self.name,
            "RepoOwner": self.repo_owner,
            "RepoName": self.repo_name,
            "Version": version,
            "VersionPrefix": self.version_prefix,
        }


def _parse_archive_kind(value: object) -> object:
    if value is None or isinstance(value, ArchiveKind):
        return value
    if isinstance(value, str):
        try:
            return ArchiveKind.parse(value)
        except UnsupportedArchiveKindError as exc:
            raise ValueError(str(exc)) from exc
    return value


class BinaryPluginConfig(PluginConfig):
    """Configuration of a tool shipped as a prebuilt binary or archive."""

    binary_name: str = ""
    file_name_template: str = DEFAULT_FILE_NAME_TEMPLATE
    download_url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE
    archive_kind: ArchiveKind | None = None
    flatten_single_directory: bool = True

    @field_validator("archive_kind", mode="before")
    @classmethod
    def _coerce_archive_kind(cls, value: object) -> object:
        return _parse_archive_kind(value)

    @property
    def effective_binary_name(self) -> str:
        """Return ``binary_name`` or, when unset, the plugin name."""

        return self.binary_name or self.name

    def template_values(self, version: str) -> dict[str, str]:
        values = super().template_values(version)
        values["BinaryName"] = self.effective_binary_name
        if self.archive_kind is not None:
            values["ArchiveExt"] = self.archive_kind.extension
        return values


class SourceBuildPluginConfig(PluginConfig):
    """Configuration of a tool compiled from a source archive or checkout."""

    source_url_template: str = DEFAULT_SOURCE_URL_TEMPLATE
    source_url_resolver: SourceURLResolver | None = None
    archive_kind: ArchiveKind = ArchiveKind.TAR_GZ
    archive_name_template: str = DEFAULT_ARCHIVE_NAME_TEMPLATE
    extracted_dir_template: str = DEFAULT_EXTRACTED_DIR_TEMPLATE
    auto_detect_extracted_dir: bool = False
    git_url_template: str | None = None
    skip_download: bool = False
    skip_extract: bool = False
    create_bin_dir: bool = True
    min_archive_size: int = DEFAULT_MIN_ARCHIVE_SIZE
    pre_build: BuildHook | None = None
    build: BuildHook | None = None

    @field_validator("archive_kind", mode="before")
    @classmethod
    def _coerce_archive_kind(cls, value: object) -> object:
        return _parse_archive_kind(value)

    @field_validator("min_archive_size")
    @classmethod
    def _require_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("min_archive_size must not be negative")
        return value

    def template_values(self, version: str) -> dict[str, str]:
        values = super().template_values(version)
        values["ArchiveExt"] = self.archive_kind.extension
        return values


__all__ = [
    "BinaryPluginConfig",
    "BuildHook",
    "HookContext",
    "PluginConfig",
    "PluginHelp",
    "SourceBuildPluginConfig",
    "SourceURLResolver",
]
