# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bounded, path-contained extraction of tar, zip and gzip payloads.

Every entry of every archive goes through the same checks: its destination
must stay lexically inside the extraction root (``InvalidFilePathError``
otherwise), and every regular-file write is metered against a per-file and a
cumulative ceiling shared through one :class:`ByteBudget`. Symlinks are
recreated verbatim; only the link's own location is checked. Hard links are
copied from a regular file that resolves inside the root. Nothing is rolled
back on failure.
"""

from __future__ import annotations

import gzip
import logging
import lzma
import os
import stat
import tarfile
import uuid
import zipfile
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO, Final

from ..context import OperationContext
from ..errors import ArchiveReadError, ArchiveTooLargeError, InvalidFilePathError, UnsupportedArchiveKindError
from ..fsutils import DIRECTORY_MODE, PRIVATE_FILE_MODE, ensure_dir, is_within, remove_path
from .kinds import ArchiveKind
from .limits import ArchiveLimits, ByteBudget, LimitedWriter, copy_limited

LOGGER = logging.getLogger(__name__)

FILE_MODE_MASK: Final[int] = 0o755
FILE_MODE_FLOOR: Final[int] = 0o600
DEFAULT_ENTRY_MODE: Final[int] = 0o644
_MAX_LINK_TARGET_BYTES: Final[int] = 4096

_READ_ERRORS: Final[tuple[type[BaseException], ...]] = (
    tarfile.TarError,
    zipfile.BadZipFile,
    gzip.BadGzipFile,
    lzma.LZMAError,
    EOFError,
    zlib.error,
    UnicodeDecodeError,
)


def contained_path(root: Path, entry_name: str) -> Path:
    """Return the destination of ``entry_name`` below ``root``.

    Args:
        root: Normalised absolute extraction root.
        entry_name: Name stored in the archive.

    Returns:
        Path: Joined destination path.

    Raises:
        InvalidFilePathError: If the entry is absolute or climbs out of ``root``.
    """

    target = os.path.normpath(os.path.join(root, entry_name))
    if not is_within(target, root):
        raise InvalidFilePathError(entry_name, root)
    return Path(target)


def _entry_path(root: Path, entry_name: str) -> Path:
    """Return the destination of a non-directory entry; only directories may name the root itself."""

    target = contained_path(root, entry_name)
    if target == root:
        raise InvalidFilePathError(entry_name, root)
    return target


def _hard_link_source(root: Path, link_name: str) -> Path:
    linked = contained_path(root, link_name)
    if linked.is_symlink() or not is_within(os.path.realpath(linked), os.path.realpath(root)):
        raise InvalidFilePathError(link_name, root)
    return linked


def _safe_mode(mode: int) -> int:
    return (mode & FILE_MODE_MASK) | FILE_MODE_FLOOR


def _write_entry(
    target: Path,
    source: BinaryIO,
    *,
    mode: int,
    budget: ByteBudget,
    limits: ArchiveLimits,
    ctx: OperationContext,
) -> None:
    ensure_dir(target.parent)
    if target.is_symlink() or target.is_dir():
        remove_path(target)
    with target.open("wb") as handle:
        copy_limited(source, LimitedWriter(handle, budget, limits), ctx)
    target.chmod(_safe_mode(mode))


def _make_symlink(target: Path, link_target: str) -> None:
    ensure_dir(target.parent)
    remove_path(target)
    os.symlink(link_target, target)


def _check_declared_size(name: str, size: int, limits: ArchiveLimits) -> None:
    if size > limits.max_file_bytes:
        raise ArchiveTooLargeError(
            f"archive entry {name} declares {size} bytes, above the per-file limit of {limits.max_file_bytes}",
        )


def _extract_tar_members(
    archive: tarfile.TarFile,
    root: Path,
    *,
    budget: ByteBudget,
    limits: ArchiveLimits,
    ctx: OperationContext,
) -> None:
    for member in archive:
        ctx.check()
        if member.isdir():
            contained_path(root, member.name).mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
            continue
        target = _entry_path(root, member.name)
        if member.isreg():
            _check_declared_size(member.name, member.size, limits)
            source = archive.extractfile(member)
            if source is None:
                raise ArchiveReadError(f"cannot read tar entry {member.name}")
            with source:
                _write_entry(target, source, mode=member.mode, budget=budget, limits=limits, ctx=ctx)
        elif member.issym():
            _make_symlink(target, member.linkname)
        elif member.islnk():
            linked = _hard_link_source(root, member.linkname)
            if not linked.is_file():
                raise ArchiveReadError(f"hard link {member.name} refers to missing entry {member.linkname}")
            with linked.open("rb") as source:
                _write_entry(target, source, mode=member.mode, budget=budget, limits=limits, ctx=ctx)
        else:
            LOGGER.debug("skipping special tar entry %s", member.name)


def _extract_tar(
    archive_path: Path,
    dest_dir: Path,
    mode: str,
    *,
    limits: ArchiveLimits,
    ctx: OperationContext | None,
    budget: ByteBudget | None,
) -> None:
    limits.validate()
    root = Path(os.path.normpath(os.path.abspath(dest_dir)))
    ensure_dir(root)
    try:
        with tarfile.open(archive_path, mode) as archive:
            _extract_tar_members(
                archive,
                root,
                budget=budget if budget is not None else ByteBudget(),
                limits=limits,
                ctx=ctx or OperationContext.background(),
            )
    except _READ_ERRORS as exc:
        raise ArchiveReadError(f"reading {archive_path}: {exc}") from exc


def extract_tar_gz(
    archive_path: Path,
    dest_dir: Path,
    *,
    limits: ArchiveLimits = ArchiveLimits(),
    ctx: OperationContext | None = None,
    budget: ByteBudget | None = None,
) -> None:
    """Extract a gzip-compressed tarball into ``dest_dir``."""

    _extract_tar(archive_path, dest_dir, "r:gz", limits=limits, ctx=ctx, budget=budget)


def extract_tar_xz(
    archive_path: Path,
    dest_dir: Path,
    *,
    limits: ArchiveLimits = ArchiveLimits(),
    ctx: OperationContext | None = None,
    budget: ByteBudget | None = None,
) -> None:
    """Extract an xz-compressed tarball into ``dest_dir``."""

    _extract_tar(archive_path, dest_dir, "r:xz", limits=limits, ctx=ctx, budget=budget)


def extract_zip(
    archive_path: Path,
    dest_dir: Path,
    *,
    limits: ArchiveLimits = ArchiveLimits(),
    ctx: OperationContext | None = None,
    budget: ByteBudget | None = None,
) -> None:
    """Extract a zip archive into ``dest_dir``.

    Entries whose stored Unix mode marks them as symlinks are recreated as
    symlinks; every other non-directory entry is written as a regular file.

    Args:
        archive_path: Path of the ``.zip`` file.
        dest_dir: Extraction root.
        limits: Size ceilings for this extraction.
        ctx: Optional cancellation context.
        budget: Optional shared byte counter; a fresh one is used when omitted.

    Raises:
        InvalidFilePathError: If an entry escapes ``dest_dir``.
        ArchiveTooLargeError: If a ceiling is exceeded.
        ArchiveReadError: If the archive is corrupt.
    """

    limits.validate()
    context = ctx or OperationContext.background()
    shared = budget if budget is not None else ByteBudget()
    root = Path(os.path.normpath(os.path.abspath(dest_dir)))
    ensure_dir(root)
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                context.check()
                if info.is_dir():
                    contained_path(root, info.filename).mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
                    continue
                target = _entry_path(root, info.filename)
                _check_declared_size(info.filename, info.file_size, limits)
                unix_mode = info.external_attr >> 16
                if stat.S_ISLNK(unix_mode):
                    if info.file_size > _MAX_LINK_TARGET_BYTES:
                        raise ArchiveTooLargeError(f"symlink target of {info.filename} is implausibly long")
                    _make_symlink(target, archive.read(info).decode("utf-8"))
                    continue
                with archive.open(info) as source:
                    _write_entry(
                        target,
                        source,
                        mode=(unix_mode & 0o777) or DEFAULT_ENTRY_MODE,
                        budget=shared,
                        limits=limits,
                        ctx=context,
                    )
    except _READ_ERRORS as exc:
        raise ArchiveReadError(f"reading {archive_path}: {exc}") from exc


def extract_gz(
    gz_path: Path,
    dest_path: Path,
    *,
    limits: ArchiveLimits = ArchiveLimits(),
    ctx: OperationContext | None = None,
    budget: ByteBudget | None = None,
) -> None:
    """Decompress a single-file gzip payload to ``dest_path``.

    The output is written with private permissions; callers that install an
    executable adjust the mode afterwards.
    """

    limits.validate()
    context = ctx or OperationContext.background()
    ensure_dir(dest_path.parent)
    try:
        with gzip.open(gz_path, "rb") as source:
            _write_entry(
                dest_path,
                source,  # type: ignore[arg-type]
                mode=PRIVATE_FILE_MODE,
                budget=budget if budget is not None else ByteBudget(),
                limits=limits,
                ctx=context,
            )
    except _READ_ERRORS as exc:
        raise ArchiveReadError(f"reading {gz_path}: {exc}") from exc


_TREE_EXTRACTORS: Final[dict[ArchiveKind, Callable[..., None]]] = {
    ArchiveKind.TAR_GZ: extract_tar_gz,
    ArchiveKind.TAR_XZ: extract_tar_xz,
    ArchiveKind.ZIP: extract_zip,
}


def extract_archive(
    archive_path: Path,
    dest_dir: Path,
    kind: ArchiveKind,
    *,
    limits: ArchiveLimits = ArchiveLimits(),
    ctx: OperationContext | None = None,
) -> None:
    """Extract ``archive_path`` into ``dest_dir`` according to ``kind``.

    Plain gzip payloads are decompressed to ``dest_dir/<name without .gz>``.

    Raises:
        UnsupportedArchiveKindError: If ``kind`` is ``none``.
    """

    if kind is ArchiveKind.GZ:
        stem = archive_path.name[: -len(".gz")] if archive_path.name.endswith(".gz") else archive_path.name
        extract_gz(archive_path, Path(dest_dir) / stem, limits=limits, ctx=ctx)
        return
    extractor = _TREE_EXTRACTORS.get(kind)
    if extractor is None:
        raise UnsupportedArchiveKindError(f"unsupported archive type: {kind.value}")
    extractor(archive_path, dest_dir, limits=limits, ctx=ctx)


def flatten_single_directory(root: Path) -> str | None:
    """Hoist the children of a lone top-level directory into ``root``.

    Args:
        root: Directory that received an extraction.

    Returns:
        str | None: Name of the removed wrapper directory, or ``None`` when
        ``root`` did not contain exactly one real directory.
    """

    entries = list(root.iterdir())
    if len(entries) != 1:
        return None
    wrapper = entries[0]
    if wrapper.is_symlink() or not wrapper.is_dir():
        return None
    holder = root / f".flatten-{uuid.uuid4().hex}"
    wrapper.rename(holder)
    for child in list(holder.iterdir()):
        child.rename(root / child.name)
    holder.rmdir()
    return wrapper.name


__all__ = [
    "contained_path",
    "extract_archive",
    "extract_gz",
    "extract_tar_gz",
    "extract_tar_xz",
    "extract_zip",
    "flatten_single_directory",
]
