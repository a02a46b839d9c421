# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Archive formats understood by the extraction engine."""

from __future__ import annotations

from enum import Enum

from ..errors import UnsupportedArchiveKindError


class ArchiveKind(str, Enum):
    """Enumerate payload layouts of downloadable artifacts."""

    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    ZIP = "zip"
    GZ = "gz"
    NONE = "none"

    @property
    def extension(self) -> str:
        """Return the file-name extension without a leading dot."""

        return "" if self is ArchiveKind.NONE else self.value

    @classmethod
    def parse(cls, raw: str | ArchiveKind) -> ArchiveKind:
        """Return the kind named by ``raw`` (``tgz`` and ``""`` are accepted aliases).

        Raises:
            UnsupportedArchiveKindError: If ``raw`` names no known kind.
        """

        if isinstance(raw, ArchiveKind):
            return raw
        normalized = raw.strip().lower().lstrip(".")
        if normalized in {"tgz"}:
            return cls.TAR_GZ
        if normalized in {"", "raw", "binary"}:
            return cls.NONE
        try:
            return cls(normalized)
        except ValueError as exc:
            raise UnsupportedArchiveKindError(f"unsupported archive type: {raw}") from exc

    @classmethod
    def detect(cls, file_name: str) -> ArchiveKind:
        """Infer the kind from the suffix of ``file_name``; unknown means raw."""

        lowered = file_name.lower()
        if lowered.endswith((".tar.gz", ".tgz")):
            return cls.TAR_GZ
        if lowered.endswith((".tar.xz", ".txz")):
            return cls.TAR_XZ
        if lowered.endswith(".zip"):
            return cls.ZIP
        if lowered.endswith(".gz"):
            return cls.GZ
        return cls.NONE


__all__ = ["ArchiveKind"]
