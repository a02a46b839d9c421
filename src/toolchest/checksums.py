# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""SHA-256 helpers and the ``.tool-sums`` checksum ledger."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .errors import ChecksumMismatchError

LOGGER = logging.getLogger(__name__)

HASH_PREFIX: Final[str] = "sha256:"
_READ_CHUNK: Final[int] = 1 << 20
_ARCHIVE_SUFFIXES: Final[tuple[str, ...]] = (".tar.gz", ".tgz", ".tar.xz", ".zip", ".gz")
_LEDGER_HEADER: Final[tuple[str, ...]] = (
    "# Tool checksums - DO NOT EDIT",
    "# Format: name version sha256:hash",
)


def sha256_file(path: Path) -> str:
    """Return the lower-case hex SHA-256 digest of ``path``."""

    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def parse_checksum_text(text: str, file_name: str | None = None) -> str:
    """Extract a hex digest from checksum file content.

    Accepts a bare digest, a single ``sha256sum`` line, or a multi-line
    ``sha256sum`` listing in which case the line naming ``file_name`` wins.

    Raises:
        ValueError: If no digest can be found.
    """

    candidates: list[tuple[str, str | None]] = []
    for raw in text.splitlines():
        fields = raw.strip().split()
        if not fields or fields[0].startswith("#"):
            continue
        name = fields[1].lstrip("*") if len(fields) > 1 else None
        candidates.append((fields[0].lower().removeprefix(HASH_PREFIX), name))
    if not candidates:
        raise ValueError("checksum content is empty")
    if file_name is not None:
        for digest, name in candidates:
            if name is not None and Path(name).name == file_name:
                return digest
    return candidates[0][0]


def verify_sha256(path: Path, expected: str) -> str:
    """Compare the digest of ``path`` against ``expected``.

    Args:
        path: File to hash.
        expected: Hex digest, optionally prefixed ``sha256:`` or followed by a
            file name as in ``sha256sum`` output.

    Returns:
        str: The computed digest.

    Raises:
        ChecksumMismatchError: If the digests differ.
    """

    wanted = parse_checksum_text(expected)
    actual = sha256_file(path)
    if actual != wanted:
        raise ChecksumMismatchError(path.name, wanted, actual)
    return actual


def _walk_sorted(root: Path) -> Iterator[Path]:
    for current, dirs, files in os.walk(root):
        dirs.sort()
        base = Path(current)
        entries = sorted([*files, *(name for name in dirs if (base / name).is_symlink())])
        for name in entries:
            yield base / name


def directory_hash(root: Path) -> str:
    """Return a combined ``sha256:`` digest of every file below ``root``.

    Each regular file contributes its relative path followed by its bytes;
    symlinks contribute ``relpath->target``.
    """

    digest = hashlib.sha256()
    for path in _walk_sorted(root):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            digest.update(f"{relative}->{os.readlink(path)}".encode())
            continue
        if not path.is_file():
            continue
        digest.update(relative.encode())
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
                digest.update(chunk)
    return HASH_PREFIX + digest.hexdigest()


def download_hash(download_path: Path) -> str:
    """Return the ``sha256:`` digest identifying a download directory.

    The first archive file (by name) is hashed on its own; without one the
    whole directory is hashed with :func:`directory_hash`.
    """

    for entry in sorted(download_path.iterdir()):
        if entry.is_file() and entry.name.endswith(_ARCHIVE_SUFFIXES):
            return HASH_PREFIX + sha256_file(entry)
    return directory_hash(download_path)


@dataclass(slots=True)
class ToolSums:
    """In-memory view of a ``.tool-sums`` ledger.

    Lines have the form ``name version sha256:<hex>``; blank lines and lines
    starting with ``#`` are ignored.
    """

    path: Path
    entries: dict[tuple[str, str], str] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> ToolSums:
        """Read ``path``; a missing ledger yields an empty one."""

        ledger = cls(path)
        if not path.is_file():
            return ledger
        for raw in path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) >= 3:
                ledger.entries[(fields[0], fields[1])] = fields[2]
        return ledger

    def get(self, name: str, version: str) -> str | None:
        return self.entries.get((name, version))

    def record(self, name: str, version: str, digest: str) -> None:
        self.entries[(name, version)] = digest

    def save(self) -> None:
        """Write the ledger sorted by tool name then version."""

        lines = list(_LEDGER_HEADER)
        for (name, version), digest in sorted(self.entries.items()):
            lines.append(f"{name} {version} {digest}")
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def verify_tool_sum(ledger: ToolSums, name: str, version: str, download_path: Path) -> bool:
    """Check a download directory against its ledger entry.

    Returns:
        bool: ``True`` when an entry existed and matched, ``False`` when the
        ledger has no entry for ``name``/``version``.

    Raises:
        ChecksumMismatchError: If the recorded digest differs.
    """

    expected = ledger.get(name, version)
    if expected is None:
        return False
    actual = download_hash(download_path)
    if actual != expected:
        raise ChecksumMismatchError(f"{name} {version}", expected, actual)
    LOGGER.debug("checksum verified for %s %s", name, version)
    return True


def record_tool_sum(ledger: ToolSums, name: str, version: str, download_path: Path) -> str:
    """Hash ``download_path``, store it in ``ledger`` and persist the ledger."""

    digest = download_hash(download_path)
    ledger.record(name, version, digest)
    ledger.save()
    return digest


__all__ = [
    "HASH_PREFIX",
    "ToolSums",
    "directory_hash",
    "download_hash",
    "parse_checksum_text",
    "record_tool_sum",
    "sha256_file",
    "verify_sha256",
    "verify_tool_sum",
]
