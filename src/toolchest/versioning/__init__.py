# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public exports for version ordering and selection."""

from __future__ import annotations

from .listing import VersionListing, list_versions
from .model import (
    PRERELEASE_MARKERS,
    Ordering,
    VersionKey,
    compare_versions,
    filter_stable,
    is_prerelease,
    resolve_latest_matching,
    sort_versions,
)

__all__ = [
    "Ordering",
    "PRERELEASE_MARKERS",
    "VersionKey",
    "VersionListing",
    "compare_versions",
    "filter_stable",
    "is_prerelease",
    "list_versions",
    "resolve_latest_matching",
    "sort_versions",
]
