# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ordering, classification and selection of tool version strings.

Version strings are treated as opaque text with a derived sort key: a leading
run of dot-separated integers followed by an optional trailing segment. The
model never strips tool-specific prefixes such as ``v`` or ``go``; callers do
that before handing versions over.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from functools import cmp_to_key
from typing import Final

from ..errors import NoVersionsFoundError, NoVersionsMatchingError

_NUMERIC_HEAD: Final[re.Pattern[str]] = re.compile(r"^(\d+(?:\.\d+)*)(.*)$", re.DOTALL)
_SUFFIX_CHUNK: Final[re.Pattern[str]] = re.compile(r"\d+|[^\d]+")
_SEPARATORS: Final[str] = ".-_+~"

PRERELEASE_MARKERS: Final[tuple[str, ...]] = (
    "alpha",
    "beta",
    "rc",
    "dev",
    "nightly",
    "snapshot",
    "preview",
    "canary",
    "-pre",
)
_MARKER_PATTERN: Final[re.Pattern[str]] = re.compile(
    "|".join(re.escape(marker) for marker in PRERELEASE_MARKERS),
    re.IGNORECASE,
)
# Date-stamped snapshots such as ``1.4.0-20240131`` or ``nightly.20231201``.
_DATE_STAMP: Final[re.Pattern[str]] = re.compile(r"(?:^|\D)(?:19|20)\d{2}[01]\d[0-3]\d(?:\D|$)")


class Ordering(IntEnum):
    """Three-way comparison outcome."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True, slots=True)
class VersionKey:
    """Comparable decomposition of a version string."""

    numbers: tuple[int, ...]
    suffix: str
    prerelease: bool

    @classmethod
    def parse(cls, version: str, prerelease_pattern: re.Pattern[str] | None = None) -> VersionKey:
        """Split ``version`` into its numeric head and trailing segment.

        Args:
            version: Version text with any tool prefix already removed.
            prerelease_pattern: Optional tool-specific pre-release expression.

        Returns:
            VersionKey: Key used by :func:`compare_versions`.
        """

        match = _NUMERIC_HEAD.match(version.strip())
        if match is None:
            numbers: tuple[int, ...] = ()
            suffix = version.strip()
        else:
            numbers = tuple(int(part) for part in match.group(1).split("."))
            suffix = match.group(2).lstrip(_SEPARATORS)
        return cls(
            numbers=numbers,
            suffix=suffix,
            prerelease=is_prerelease(version, prerelease_pattern),
        )


def is_prerelease(version: str, pattern: re.Pattern[str] | str | None = None) -> bool:
    """Return ``True`` when ``version`` carries a pre-release marker.

    Args:
        version: Version string to classify.
        pattern: Optional tool-specific expression; a match marks the version
            as pre-release in addition to the generic markers.

    Returns:
        bool: ``True`` for alpha/beta/rc/dev/nightly/date-stamped versions.
    """

    if _MARKER_PATTERN.search(version) or _DATE_STAMP.search(version):
        return True
    if pattern is None:
        return False
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return compiled.search(version) is not None


def _suffix_chunks(suffix: str) -> tuple[tuple[int, int | str], ...]:
    chunks: list[tuple[int, int | str]] = []
    for chunk in _SUFFIX_CHUNK.findall(suffix.lower()):
        if chunk.isdigit():
            chunks.append((0, int(chunk)))
        else:
            chunks.append((1, chunk))
    return tuple(chunks)


def _compare_suffix(left: str, right: str) -> int:
    left_chunks = _suffix_chunks(left)
    right_chunks = _suffix_chunks(right)
    if left_chunks == right_chunks:
        return 0
    # Mixed int/str chunks never compare directly: the kind tag comes first.
    return -1 if left_chunks < right_chunks else 1


def _trailing_rank(key: VersionKey) -> int:
    # Pre-release tails sort before the final release, other tails after it.
    if not key.suffix:
        return 1
    return 0 if key.prerelease else 2


def _compare_keys(left: VersionKey, right: VersionKey) -> int:
    for left_part, right_part in zip(left.numbers, right.numbers):
        if left_part != right_part:
            return -1 if left_part < right_part else 1
    if len(left.numbers) != len(right.numbers):
        return -1 if len(left.numbers) < len(right.numbers) else 1
    left_rank = _trailing_rank(left)
    right_rank = _trailing_rank(right)
    if left_rank != right_rank:
        return -1 if left_rank < right_rank else 1
    return _compare_suffix(left.suffix, right.suffix)


def compare_versions(
    left: str,
    right: str,
    *,
    prerelease_pattern: re.Pattern[str] | None = None,
) -> Ordering:
    """Compare two version strings numerically first.

    Shared numeric components decide first; a numeric sequence that is a strict
    prefix of the other sorts first. When the numeric parts are identical a
    pre-release tail sorts before the bare release, and any other tail sorts
    after it. Remaining ties are broken on the tail text, with embedded
    numbers compared as integers.

    Args:
        left: First version string.
        right: Second version string.
        prerelease_pattern: Optional tool-specific pre-release expression.

    Returns:
        Ordering: ``LESS``, ``EQUAL`` or ``GREATER``.
    """

    result = _compare_keys(
        VersionKey.parse(left, prerelease_pattern),
        VersionKey.parse(right, prerelease_pattern),
    )
    if result == 0 and left != right:
        # Distinct spellings of the same key ("1.0" vs "01.0") still need a total order.
        result = -1 if left < right else 1
    return Ordering(result)


def sort_versions(
    versions: Iterable[str],
    *,
    prerelease_pattern: re.Pattern[str] | None = None,
) -> list[str]:
    """Return ``versions`` sorted ascending with :func:`compare_versions`."""

    def _cmp(left: str, right: str) -> int:
        return int(compare_versions(left, right, prerelease_pattern=prerelease_pattern))

    return sorted(versions, key=cmp_to_key(_cmp))


def filter_stable(
    versions: Sequence[str],
    *,
    prerelease_pattern: re.Pattern[str] | None = None,
) -> list[str]:
    """Drop pre-release versions unless that would leave nothing.

    Args:
        versions: Candidate versions in caller order.
        prerelease_pattern: Optional tool-specific pre-release expression.

    Returns:
        list[str]: Stable subset in the original order, or the full input
        when every entry is a pre-release.
    """

    stable = [version for version in versions if not is_prerelease(version, prerelease_pattern)]
    return stable if stable else list(versions)


def resolve_latest_matching(
    versions: Sequence[str],
    query: str = "",
    *,
    prerelease_pattern: re.Pattern[str] | None = None,
) -> str:
    """Return the greatest version starting with ``query``, preferring stable ones.

    Args:
        versions: Known versions, typically already sorted ascending.
        query: Prefix the result must start with; empty matches everything.
        prerelease_pattern: Optional tool-specific pre-release expression.

    Returns:
        str: Greatest stable match, or the greatest match when none is stable.

    Raises:
        NoVersionsFoundError: If ``versions`` is empty.
        NoVersionsMatchingError: If no version starts with ``query``.
    """

    if not versions:
        raise NoVersionsFoundError("no versions found")
    matching = [version for version in versions if version.startswith(query)]
    if not matching:
        raise NoVersionsMatchingError(query)
    candidates = filter_stable(matching, prerelease_pattern=prerelease_pattern)
    return sort_versions(candidates, prerelease_pattern=prerelease_pattern)[-1]


__all__ = [
    "Ordering",
    "PRERELEASE_MARKERS",
    "VersionKey",
    "compare_versions",
    "filter_stable",
    "is_prerelease",
    "resolve_latest_matching",
    "sort_versions",
]
