# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn raw repository tags or releases into an ordered version list."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..context import OperationContext
from ..errors import ConfigError
from ..interfaces.sources import ReleaseSource
from .model import filter_stable, sort_versions

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VersionListing:
    """Describe how a tool's versions are read from its repository."""

    repo_url: str
    version_prefix: str = ""
    version_filter: str | None = None
    prerelease_pattern: str | None = None
    use_tags: bool = False

    def compiled_filter(self) -> re.Pattern[str] | None:
        """Return the compiled version filter, if any.

        Raises:
            ConfigError: If the expression does not compile.
        """

        return _compile(self.version_filter, label="version filter")

    def compiled_prerelease(self) -> re.Pattern[str] | None:
        """Return the compiled tool-specific pre-release expression, if any.

        Raises:
            ConfigError: If the expression does not compile.
        """

        return _compile(self.prerelease_pattern, label="pre-release pattern")


def _compile(pattern: str | None, *, label: str) -> re.Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f"invalid {label} regex {pattern!r}: {exc}") from exc


def _strip_prefix(raw: str, listing: VersionListing) -> str | None:
    prefix = listing.version_prefix
    if not prefix:
        return raw
    if raw.startswith(prefix):
        return raw[len(prefix) :]
    # Tags without the prefix belong to other release trains; release names are kept.
    return None if listing.use_tags else raw


def list_versions(source: ReleaseSource, listing: VersionListing, ctx: OperationContext) -> list[str]:
    """Return the versions of a repository, sorted ascending, stable first.

    Tags or release names are stripped of ``version_prefix``, empty results are
    dropped and the remainder is matched against ``version_filter``. The result
    keeps only stable versions unless none exist.

    Args:
        source: Release source used to enumerate the repository.
        listing: Listing configuration for the tool.
        ctx: Cancellation context.

    Returns:
        list[str]: Ordered versions with prefixes removed.

    Raises:
        ConfigError: If a configured regular expression is invalid.
    """

    version_filter = listing.compiled_filter()
    prerelease = listing.compiled_prerelease()
    if listing.use_tags:
        raw_names = source.list_tags(ctx, listing.repo_url)
    else:
        raw_names = source.list_releases(ctx, listing.repo_url)

    versions: list[str] = []
    for raw in raw_names:
        candidate = _strip_prefix(raw, listing)
        if not candidate:
            continue
        if version_filter is not None and version_filter.search(candidate) is None:
            continue
        versions.append(candidate)

    LOGGER.debug("listed %d of %d names from %s", len(versions), len(raw_names), listing.repo_url)
    ordered = sort_versions(dict.fromkeys(versions), prerelease_pattern=prerelease)
    return filter_stable(ordered, prerelease_pattern=prerelease)


__all__ = ["VersionListing", "list_versions"]
