# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process-wide engine settings resolved once from the environment."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .archives.limits import DEFAULT_MAX_FILE_BYTES, DEFAULT_MAX_TOTAL_BYTES, ArchiveLimits
from .errors import ConfigError
from .utils.bool_utils import interpret_optional_bool

DEFAULT_GITHUB_API_URL: Final[str] = "https://api.github.com"
DEFAULT_TOOL_SUMS_FILE: Final[str] = ".tool-sums"
DEFAULT_DOWNLOAD_TIMEOUT: Final[float] = 1800.0
DEFAULT_API_TIMEOUT: Final[float] = 30.0
DEFAULT_MIN_DOWNLOAD_SIZE: Final[int] = 1024

ENV_DATA_DIR: Final[str] = "ASDF_DATA_DIR"
ENV_GITHUB_TOKEN: Final[str] = "GITHUB_TOKEN"
ENV_GITHUB_API_TOKEN: Final[str] = "GITHUB_API_TOKEN"
ENV_GITHUB_API_URL: Final[str] = "TOOLCHEST_GITHUB_API_URL"
ENV_ARCH_OVERRIDE: Final[str] = "ASDF_OVERWRITE_ARCH"
ENV_VERIFY_CHECKSUMS: Final[str] = "TOOLCHEST_VERIFY_CHECKSUMS"
ENV_TOOL_SUMS: Final[str] = "TOOLCHEST_TOOL_SUMS"
ENV_QUIET: Final[str] = "TOOLCHEST_QUIET"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
ENV_NO_EMOJI: Final[str] = "TOOLCHEST_NO_EMOJI"


class EngineSettings(BaseModel):
    """Immutable knobs shared by every plugin and the installer."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".asdf")
    github_token: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    arch_override: str | None = None
    verify_checksums: bool = False
    tool_sums_path: Path = Path(DEFAULT_TOOL_SUMS_FILE)
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT
    api_timeout: float = DEFAULT_API_TIMEOUT
    min_download_size: int = DEFAULT_MIN_DOWNLOAD_SIZE
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES
    use_color: bool = True
    use_emoji: bool = True
    quiet: bool = False

    @field_validator("download_timeout", "api_timeout", "max_file_bytes", "max_total_bytes")
    @classmethod
    def _require_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("min_download_size")
    @classmethod
    def _require_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("github_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def archive_limits(self) -> ArchiveLimits:
        """Return the extraction ceilings as an :class:`ArchiveLimits`."""

        return ArchiveLimits(max_file_bytes=self.max_file_bytes, max_total_bytes=self.max_total_bytes)

    @property
    def installs_dir(self) -> Path:
        """Return the root holding ``<tool>/<version>`` install directories."""

        return self.data_dir / "installs"

    @property
    def downloads_dir(self) -> Path:
        """Return the root holding ``<tool>/<version>`` download directories."""

        return self.data_dir / "downloads"

    def install_path(self, tool: str, version: str) -> Path:
        """Return the install root for ``tool`` at ``version``."""

        return self.installs_dir / tool / version

    def download_path(self, tool: str, version: str) -> Path:
        """Return the download directory for ``tool`` at ``version``."""

        return self.downloads_dir / tool / version

    @classmethod
    def from_environment(cls, environ: Mapping[str, str], **overrides: object) -> EngineSettings:
        """Build settings from an environment mapping.

        This is the only place the engine reads environment variables; pass
        ``os.environ`` at startup and hand the result to the installer.

        Args:
            environ: Environment mapping to read.
            **overrides: Explicit field values that win over the environment.

        Returns:
            EngineSettings: Validated settings.

        Raises:
            ConfigError: If a value is malformed.
        """

        values: dict[str, object] = {}
        data_dir = environ.get(ENV_DATA_DIR)
        if data_dir:
            values["data_dir"] = Path(data_dir).expanduser()
        token = environ.get(ENV_GITHUB_TOKEN) or environ.get(ENV_GITHUB_API_TOKEN)
        if token:
            values["github_token"] = token
        if environ.get(ENV_GITHUB_API_URL):
            values["github_api_url"] = environ[ENV_GITHUB_API_URL]
        if environ.get(ENV_ARCH_OVERRIDE):
            values["arch_override"] = environ[ENV_ARCH_OVERRIDE]
        if environ.get(ENV_TOOL_SUMS):
            values["tool_sums_path"] = Path(environ[ENV_TOOL_SUMS]).expanduser()
        try:
            verify = interpret_optional_bool(environ.get(ENV_VERIFY_CHECKSUMS))
            quiet = interpret_optional_bool(environ.get(ENV_QUIET))
            no_emoji = interpret_optional_bool(environ.get(ENV_NO_EMOJI))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        if verify is not None:
            values["verify_checksums"] = verify
        if quiet is not None:
            values["quiet"] = quiet
        if no_emoji is not None:
            values["use_emoji"] = not no_emoji
        if environ.get(ENV_NO_COLOR):
            values["use_color"] = False
        values.update(overrides)
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(f"invalid engine settings: {exc}") from exc


__all__ = ["EngineSettings"]
