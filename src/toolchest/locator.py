# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render artifact file names and download URLs from declarative templates.

Everything here is a pure function of its inputs: no network or filesystem
access happens while an :class:`ArtifactDescriptor` is derived.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Final

from .archives.kinds import ArchiveKind
from .errors import TemplateRenderError, UnsupportedPlatformError

_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")
_LEFTOVER: Final[re.Pattern[str]] = re.compile(r"\{\{.*?\}\}")


@dataclass(frozen=True, slots=True)
class PlatformPair:
    """Operating system and architecture tokens as a tool names them."""

    os: str
    arch: str


@dataclass(frozen=True, slots=True)
class ArtifactDescriptor:
    """Concrete artifact to fetch for one tool, version and platform."""

    file_name: str
    url: str
    archive_kind: ArchiveKind


def normalize_platform(
    raw_os: str,
    raw_arch: str,
    os_map: Mapping[str, str],
    arch_map: Mapping[str, str],
    unsupported: Collection[str] = (),
) -> PlatformPair:
    """Translate host tokens through a tool's remapping tables.

    Tokens missing from a map pass through unchanged. ``unsupported`` lists
    raw OS names, raw architectures or ``os/arch`` pairs the tool does not ship.

    Args:
        raw_os: Host operating system token (``linux``, ``darwin`` ...).
        raw_arch: Canonical host architecture token (``amd64``, ``arm64`` ...).
        os_map: Tool-specific OS remapping.
        arch_map: Tool-specific architecture remapping.
        unsupported: Explicitly unsupported platforms.

    Returns:
        PlatformPair: Tokens to substitute into templates.

    Raises:
        UnsupportedPlatformError: If the host is marked unsupported.
    """

    if raw_os in unsupported or raw_arch in unsupported or f"{raw_os}/{raw_arch}" in unsupported:
        raise UnsupportedPlatformError(raw_os, raw_arch)
    return PlatformPair(os=os_map.get(raw_os, raw_os), arch=arch_map.get(raw_arch, raw_arch))


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``{{.Name}}`` placeholders in ``template``.

    Args:
        template: Template text.
        values: Placeholder values keyed by name without the leading dot.

    Returns:
        str: Rendered text.

    Raises:
        TemplateRenderError: If any placeholder has no value.
    """

    missing = tuple(dict.fromkeys(name for name in _PLACEHOLDER.findall(template) if name not in values))
    if missing:
        raise TemplateRenderError(template, missing)
    rendered = _PLACEHOLDER.sub(lambda match: values[match.group(1)], template)
    leftover = _LEFTOVER.findall(rendered)
    if leftover:
        raise TemplateRenderError(template, tuple(leftover))
    return rendered


def render_file_name(
    template: str,
    version: str,
    os_name: str,
    arch: str,
    *,
    extra: Mapping[str, str] | None = None,
) -> str:
    """Render an artifact file name.

    ``{{.Version}}``, ``{{.Platform}}`` and ``{{.Arch}}`` are always
    available; ``extra`` supplies tool-level values such as ``BinaryName``.
    """

    values = dict(extra or {})
    values.update(Version=version, Platform=os_name, Arch=arch)
    return render_template(template, values)


def render_download_url(
    url_template: str,
    owner: str,
    repo: str,
    version: str,
    file_name: str,
    *,
    extra: Mapping[str, str] | None = None,
) -> str:
    """Render a download URL for an already rendered ``file_name``."""

    values = dict(extra or {})
    values.update(RepoOwner=owner, RepoName=repo, Version=version, FileName=file_name)
    return render_template(url_template, values)


@dataclass(frozen=True, slots=True)
class ArtifactTemplate:
    """Declarative naming rules for one tool's release artifacts."""

    repo_owner: str
    repo_name: str
    file_name_template: str
    download_url_template: str
    os_map: Mapping[str, str]
    arch_map: Mapping[str, str]
    unsupported_platforms: Collection[str] = ()
    archive_kind: ArchiveKind | None = None
    extra: Mapping[str, str] | None = None

    def locate(self, version: str, raw_os: str, raw_arch: str) -> ArtifactDescriptor:
        """Return the artifact for ``version`` on the given host tokens.

        Args:
            version: Resolved version without tool prefix.
            raw_os: Host OS token.
            raw_arch: Canonical host architecture token.

        Returns:
            ArtifactDescriptor: File name, URL and archive kind.
        """

        pair = normalize_platform(raw_os, raw_arch, self.os_map, self.arch_map, self.unsupported_platforms)
        extra = dict(self.extra or {})
        extra.setdefault("Platform", pair.os)
        extra.setdefault("Arch", pair.arch)
        file_name = render_file_name(self.file_name_template, version, pair.os, pair.arch, extra=extra)
        url = render_download_url(
            self.download_url_template,
            self.repo_owner,
            self.repo_name,
            version,
            file_name,
            extra=extra,
        )
        kind = self.archive_kind if self.archive_kind is not None else ArchiveKind.detect(file_name)
        return ArtifactDescriptor(file_name=file_name, url=url, archive_kind=kind)


__all__ = [
    "ArtifactDescriptor",
    "ArtifactTemplate",
    "PlatformPair",
    "normalize_platform",
    "render_download_url",
    "render_file_name",
    "render_template",
]
