# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public exports for the archive extraction engine."""

from __future__ import annotations

from .extract import (
    contained_path,
    extract_archive,
    extract_gz,
    extract_tar_gz,
    extract_tar_xz,
    extract_zip,
    flatten_single_directory,
)
from .kinds import ArchiveKind
from .limits import ArchiveLimits, ByteBudget, LimitedWriter, copy_limited

__all__ = [
    "ArchiveKind",
    "ArchiveLimits",
    "ByteBudget",
    "LimitedWriter",
    "contained_path",
    "copy_limited",
    "extract_archive",
    "extract_gz",
    "extract_tar_gz",
    "extract_tar_xz",
    "extract_zip",
    "flatten_single_directory",
]
