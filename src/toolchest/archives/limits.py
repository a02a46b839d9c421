# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Size ceilings guarding extraction against decompression bombs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Final

from ..context import OperationContext
from ..errors import ArchiveTooLargeError, InvalidArchiveLimitsError

DEFAULT_MAX_FILE_BYTES: Final[int] = 512 << 20
DEFAULT_MAX_TOTAL_BYTES: Final[int] = 1 << 30
COPY_CHUNK_BYTES: Final[int] = 64 << 10


@dataclass(frozen=True, slots=True)
class ArchiveLimits:
    """Per-file and cumulative byte ceilings for a single extraction."""

    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES

    def validate(self) -> None:
        """Reject zero or negative ceilings.

        Raises:
            InvalidArchiveLimitsError: If either ceiling is not positive.
        """

        if self.max_file_bytes <= 0 or self.max_total_bytes <= 0:
            raise InvalidArchiveLimitsError(
                f"invalid archive size limits: per-file={self.max_file_bytes} total={self.max_total_bytes}",
            )


class ByteBudget:
    """Running byte total shared by every writer of one extraction."""

    __slots__ = ("total",)

    def __init__(self) -> None:
        self.total = 0


class LimitedWriter:
    """File writer that refuses to exceed the per-file or shared ceiling.

    Writes are truncated at whichever ceiling is hit first and then fail, so a
    file on disk never grows beyond ``max_file_bytes``.
    """

    def __init__(self, target: BinaryIO, budget: ByteBudget, limits: ArchiveLimits) -> None:
        """Bind the writer to ``target`` and the shared ``budget``.

        Args:
            target: Open binary file receiving the data.
            budget: Counter shared across the whole extraction.
            limits: Ceilings enforced for this write.

        Raises:
            InvalidArchiveLimitsError: If ``limits`` is not positive.
        """

        limits.validate()
        self._target = target
        self._budget = budget
        self._limits = limits
        self.written = 0

    def write(self, chunk: bytes) -> int:
        """Write ``chunk`` or as much of it as the ceilings allow.

        Args:
            chunk: Bytes to append.

        Returns:
            int: Number of bytes written.

        Raises:
            ArchiveTooLargeError: If any part of ``chunk`` would exceed a ceiling.
        """

        remaining_file = self._limits.max_file_bytes - self.written
        remaining_total = self._limits.max_total_bytes - self._budget.total
        allowed = min(len(chunk), remaining_file, remaining_total)
        if allowed > 0:
            self._target.write(chunk[:allowed])
            self.written += allowed
            self._budget.total += allowed
        if allowed < len(chunk):
            if remaining_file <= remaining_total:
                raise ArchiveTooLargeError(
                    f"archive entry exceeds the per-file limit of {self._limits.max_file_bytes} bytes",
                )
            raise ArchiveTooLargeError(
                f"archive exceeds the total extraction limit of {self._limits.max_total_bytes} bytes",
            )
        return allowed


def copy_limited(source: BinaryIO, writer: LimitedWriter, ctx: OperationContext) -> int:
    """Stream ``source`` into ``writer`` chunk by chunk.

    Args:
        source: Readable binary stream.
        writer: Size-limited destination.
        ctx: Cancellation context checked before every chunk.

    Returns:
        int: Number of bytes copied.
    """

    copied = 0
    while True:
        ctx.check()
        chunk = source.read(COPY_CHUNK_BYTES)
        if not chunk:
            return copied
        copied += writer.write(chunk)


__all__ = [
    "ArchiveLimits",
    "ByteBudget",
    "COPY_CHUNK_BYTES",
    "DEFAULT_MAX_FILE_BYTES",
    "DEFAULT_MAX_TOTAL_BYTES",
    "LimitedWriter",
    "copy_limited",
]
