# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception taxonomy shared by the installation engine."""

from __future__ import annotations

from pathlib import Path


class ToolchestError(RuntimeError):
    """Base class for every error raised by the engine."""


class ConfigError(ToolchestError):
    """Raised when settings or plugin configuration input is invalid."""


class TemplateRenderError(ConfigError):
    """Raised when a naming template references placeholders with no value."""

    def __init__(self, template: str, missing: tuple[str, ...]) -> None:
        names = ", ".join(missing)
        super().__init__(f"template '{template}' has unresolved placeholders: {names}")
        self.template = template
        self.missing = missing


class NoVersionsFoundError(ToolchestError):
    """Raised when a version source yields nothing at all."""


class NoVersionsMatchingError(ToolchestError):
    """Raised when a query prefix excludes every known version."""

    def __init__(self, query: str) -> None:
        super().__init__(f"no versions matching query: {query}")
        self.query = query


class UnsupportedPlatformError(ToolchestError):
    """Raised when a tool explicitly does not ship artifacts for the host."""

    def __init__(self, os_name: str, arch: str) -> None:
        super().__init__(f"platform not supported: {os_name}/{arch}")
        self.os_name = os_name
        self.arch = arch


class InvalidFilePathError(ToolchestError):
    """Raised when an archive entry would land outside the extraction root."""

    def __init__(self, entry: str, destination: Path) -> None:
        super().__init__(f"invalid file path in archive: {entry} escapes {destination}")
        self.entry = entry
        self.destination = destination


class ArchiveTooLargeError(ToolchestError):
    """Raised when extraction exceeds the per-file or cumulative ceiling."""


class InvalidArchiveLimitsError(ToolchestError):
    """Raised when an archive size ceiling is zero or negative."""


class UnsupportedArchiveKindError(ToolchestError):
    """Raised when an artifact declares an archive kind the engine cannot open."""


class ArchiveReadError(ToolchestError):
    """Raised when an archive is truncated or not in the format it claims."""


class ExpectedArtifactMissingError(ToolchestError):
    """Raised when a declared artifact is absent after installation."""

    def __init__(self, relative_path: str, install_path: Path) -> None:
        super().__init__(f"install artifact missing: {relative_path} (under {install_path})")
        self.relative_path = relative_path
        self.install_path = install_path


class DownloadFailedError(ToolchestError):
    """Raised when a remote endpoint answers with a non-success status."""

    def __init__(self, url: str, status: int, detail: str | None = None) -> None:
        message = f"download failed with status {status} for {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.url = url
        self.status = status


class TransportError(ToolchestError):
    """Raised when the HTTP transport itself fails; the cause is chained."""


class ChecksumMismatchError(ToolchestError):
    """Raised when a computed digest differs from the expected one."""

    def __init__(self, subject: str, expected: str, actual: str) -> None:
        super().__init__(f"checksum mismatch for {subject}: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class OperationCancelledError(ToolchestError):
    """Raised when an operation observes a cancelled or expired context."""


class InvalidRepositoryURLError(ToolchestError):
    """Raised when a repository URL cannot be split into owner and name."""


class BuildStepMissingError(ConfigError):
    """Raised when a source-build tool has no build hook configured."""


class SourceArchiveMissingError(ToolchestError):
    """Raised when the source archive is not present before extraction."""


class ExtractedDirectoryMissingError(ToolchestError):
    """Raised when the expected top-level source directory cannot be found."""


class BinaryNotFoundError(ToolchestError):
    """Raised when an installed archive does not contain the tool binary."""


class ExecutableNotFoundError(ToolchestError):
    """Raised when a required external program is not on ``PATH``."""


class UnknownPluginError(ToolchestError):
    """Raised when a registry lookup names a tool that is not registered."""


class DependencyCycleError(ToolchestError):
    """Raised when declared tool dependencies refer back to a tool in progress."""


class InstallError(ToolchestError):
    """Wrap the failure of one installation stage for a single tool."""

    def __init__(self, tool: str, stage: str, version: str | None = None) -> None:
        label = f"{tool} {version}" if version else tool
        super().__init__(f"{stage} failed for {label}")
        self.tool = tool
        self.stage = stage
        self.version = version

    def __str__(self) -> str:
        base = super().__str__()
        if self.__cause__ is not None:
            return f"{base}: {self.__cause__}"
        return base


__all__ = [
    "ArchiveReadError",
    "ArchiveTooLargeError",
    "BinaryNotFoundError",
    "BuildStepMissingError",
    "ChecksumMismatchError",
    "ConfigError",
    "DependencyCycleError",
    "DownloadFailedError",
    "ExecutableNotFoundError",
    "ExpectedArtifactMissingError",
    "ExtractedDirectoryMissingError",
    "InstallError",
    "InvalidArchiveLimitsError",
    "InvalidFilePathError",
    "InvalidRepositoryURLError",
    "NoVersionsFoundError",
    "NoVersionsMatchingError",
    "OperationCancelledError",
    "SourceArchiveMissingError",
    "TemplateRenderError",
    "ToolchestError",
    "TransportError",
    "UnknownPluginError",
    "UnsupportedArchiveKindError",
    "UnsupportedPlatformError",
]
