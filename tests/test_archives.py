# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for bounded, path-contained archive extraction."""

from __future__ import annotations

import io
import os
import stat
import tarfile
import zipfile
from pathlib import Path

import pytest

from toolchest.archives import (
    ArchiveKind,
    ArchiveLimits,
    ByteBudget,
    LimitedWriter,
    extract_archive,
    extract_gz,
    extract_tar_gz,
    extract_tar_xz,
    extract_zip,
    flatten_single_directory,
)
from toolchest.context import OperationContext
from toolchest.errors import (
    ArchiveReadError,
    ArchiveTooLargeError,
    InvalidArchiveLimitsError,
    InvalidFilePathError,
    OperationCancelledError,
    UnsupportedArchiveKindError,
)


def test_extract_tar_gz_writes_nested_files(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "a.tar.gz", {"a/b.txt": "hello", "top.txt": "x"})
    dest = tmp_path / "out"

    extract_tar_gz(archive, dest)

    assert (dest / "a" / "b.txt").read_text() == "hello"
    assert (dest / "top.txt").read_text() == "x"


def test_extract_tar_xz(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "a.tar.xz", {"bin/tool": "#!/bin/sh\n"}, mode="w:xz", file_mode=0o755)
    dest = tmp_path / "out"

    extract_tar_xz(archive, dest)

    tool = dest / "bin" / "tool"
    assert tool.read_text() == "#!/bin/sh\n"
    assert os.access(tool, os.X_OK)


@pytest.mark.parametrize("entry", ["../../etc/passwd", "/etc/passwd", "a/../../escape"])
def test_extract_tar_rejects_escaping_entries(tmp_path: Path, make_tar, entry: str) -> None:
    archive = make_tar(tmp_path / "evil.tar.gz", {entry: "owned"})

    with pytest.raises(InvalidFilePathError):
        extract_tar_gz(archive, tmp_path / "out")

    assert not (tmp_path / "escape").exists()


@pytest.mark.parametrize("entry", ["../evil.txt", "/etc/passwd", "a/../../escape"])
def test_extract_zip_rejects_escaping_entries(tmp_path: Path, make_zip, entry: str) -> None:
    archive = make_zip(tmp_path / "evil.zip", {entry: "owned"})

    with pytest.raises(InvalidFilePathError):
        extract_zip(archive, tmp_path / "out")

    assert not (tmp_path / "evil.txt").exists()
    assert not (tmp_path / "escape").exists()


def test_extract_tar_recreates_symlinks(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "l.tar.gz", {"a/b.txt": "hello"}, symlinks={"link": "a/b.txt"})
    dest = tmp_path / "out"

    extract_tar_gz(archive, dest)

    assert os.readlink(dest / "link") == "a/b.txt"
    assert (dest / "link").read_text() == "hello"


def test_extract_tar_rejects_symlink_outside_root(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "l.tar.gz", {}, symlinks={"../link": "target"})

    with pytest.raises(InvalidFilePathError):
        extract_tar_gz(archive, tmp_path / "out")


def test_extract_tar_copies_hard_links(tmp_path: Path) -> None:
    archive = tmp_path / "h.tar.gz"
    with tarfile.open(archive, "w:gz") as handle:
        info = tarfile.TarInfo("data.txt")
        info.size = 4
        handle.addfile(info, io.BytesIO(b"data"))
        link = tarfile.TarInfo("copy.txt")
        link.type = tarfile.LNKTYPE
        link.linkname = "data.txt"
        handle.addfile(link)
    dest = tmp_path / "out"

    extract_tar_gz(archive, dest)

    assert (dest / "copy.txt").read_bytes() == b"data"
    assert not (dest / "copy.txt").is_symlink()


def _tar_with_hard_link(path: Path, symlinks: dict[str, str], link_source: str) -> Path:
    with tarfile.open(path, "w:gz") as handle:
        for name, target in symlinks.items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            handle.addfile(info)
        link = tarfile.TarInfo("copy")
        link.type = tarfile.LNKTYPE
        link.linkname = link_source
        handle.addfile(link)
    return path


@pytest.mark.parametrize(
    ("link_name", "link_source"),
    [("s", "s"), ("d", "d/secret.txt")],
    ids=["link-to-symlink", "link-through-symlinked-dir"],
)
def test_extract_tar_rejects_hard_link_resolving_outside_root(
    tmp_path: Path,
    link_name: str,
    link_source: str,
) -> None:
    host = tmp_path / "host"
    host.mkdir()
    secret = host / "secret.txt"
    secret.write_text("host secret")
    symlink_target = str(secret) if link_name == "s" else str(host)
    archive = _tar_with_hard_link(tmp_path / "h.tar.gz", {link_name: symlink_target}, link_source)
    dest = tmp_path / "out"

    with pytest.raises(InvalidFilePathError):
        extract_tar_gz(archive, dest)

    assert not (dest / "copy").exists()


@pytest.mark.parametrize("entry", [".", "a/.."])
def test_extract_tar_rejects_file_entry_naming_the_root(tmp_path: Path, make_tar, entry: str) -> None:
    dest = tmp_path / "out"
    dest.mkdir()
    (dest / "keep.txt").write_text("keep")
    archive = make_tar(tmp_path / "root.tar.gz", {entry: "x"})

    with pytest.raises(InvalidFilePathError):
        extract_tar_gz(archive, dest)

    assert dest.is_dir()
    assert (dest / "keep.txt").read_text() == "keep"


def test_extract_zip_rejects_file_entry_naming_the_root(tmp_path: Path, make_zip) -> None:
    dest = tmp_path / "out"
    dest.mkdir()
    (dest / "keep.txt").write_text("keep")
    archive = make_zip(tmp_path / "root.zip", {".": "x"})

    with pytest.raises(InvalidFilePathError):
        extract_zip(archive, dest)

    assert dest.is_dir()
    assert (dest / "keep.txt").read_text() == "keep"


def test_extract_tar_allows_directory_entry_naming_the_root(tmp_path: Path) -> None:
    archive = tmp_path / "dot.tar.gz"
    with tarfile.open(archive, "w:gz") as handle:
        root = tarfile.TarInfo(".")
        root.type = tarfile.DIRTYPE
        handle.addfile(root)
        info = tarfile.TarInfo("./tool")
        info.size = 2
        handle.addfile(info, io.BytesIO(b"ok"))
    dest = tmp_path / "out"

    extract_tar_gz(archive, dest)

    assert (dest / "tool").read_bytes() == b"ok"


def test_extract_zip_symlink_with_undecodable_target_is_a_read_error(tmp_path: Path) -> None:
    archive = tmp_path / "bad-link.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        info = zipfile.ZipInfo("link")
        info.external_attr = (stat.S_IFLNK | 0o777) << 16
        handle.writestr(info, b"\xff\xfe")

    with pytest.raises(ArchiveReadError):
        extract_zip(archive, tmp_path / "out")


def test_extract_zip_files_and_symlinks(tmp_path: Path, make_zip) -> None:
    archive = make_zip(tmp_path / "a.zip", {"a/b.txt": "hello"}, symlinks={"a/link": "b.txt"})
    dest = tmp_path / "out"

    extract_zip(archive, dest)

    assert (dest / "a" / "b.txt").read_text() == "hello"
    assert os.readlink(dest / "a" / "link") == "b.txt"


def test_per_file_limit_is_enforced(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "big.tar.gz", {"big.bin": b"x" * 64})

    with pytest.raises(ArchiveTooLargeError, match="per-file"):
        extract_tar_gz(archive, tmp_path / "out", limits=ArchiveLimits(max_file_bytes=32, max_total_bytes=1024))


def test_total_limit_is_enforced_across_entries(tmp_path: Path, make_zip) -> None:
    archive = make_zip(tmp_path / "many.zip", {"one.bin": b"a" * 10, "two.bin": b"b" * 10})
    dest = tmp_path / "out"

    with pytest.raises(ArchiveTooLargeError, match="total"):
        extract_zip(archive, dest, limits=ArchiveLimits(max_file_bytes=10, max_total_bytes=15))

    assert (dest / "two.bin").stat().st_size == 5


def test_gz_output_is_limited(tmp_path: Path, make_gz) -> None:
    payload = make_gz(tmp_path / "tool.gz", b"z" * 100)

    with pytest.raises(ArchiveTooLargeError):
        extract_gz(payload, tmp_path / "tool", limits=ArchiveLimits(max_file_bytes=50, max_total_bytes=50))

    assert (tmp_path / "tool").stat().st_size == 50


@pytest.mark.parametrize("limits", [ArchiveLimits(0, 10), ArchiveLimits(10, 0), ArchiveLimits(-1, -1)])
def test_non_positive_limits_are_rejected(tmp_path: Path, make_tar, limits: ArchiveLimits) -> None:
    archive = make_tar(tmp_path / "a.tar.gz", {"a.txt": "a"})

    with pytest.raises(InvalidArchiveLimitsError):
        extract_tar_gz(archive, tmp_path / "out", limits=limits)


def test_extract_gz_single_file(tmp_path: Path, make_gz) -> None:
    payload = make_gz(tmp_path / "tool.gz", "binary")

    extract_gz(payload, tmp_path / "bin" / "tool")

    assert (tmp_path / "bin" / "tool").read_text() == "binary"


def test_extract_archive_dispatches_by_kind(tmp_path: Path, make_gz, make_zip) -> None:
    extract_archive(make_gz(tmp_path / "tool.gz", "gz"), tmp_path / "g", ArchiveKind.GZ)
    extract_archive(make_zip(tmp_path / "t.zip", {"z.txt": "zip"}), tmp_path / "z", ArchiveKind.ZIP)

    assert (tmp_path / "g" / "tool").read_text() == "gz"
    assert (tmp_path / "z" / "z.txt").read_text() == "zip"
    with pytest.raises(UnsupportedArchiveKindError):
        extract_archive(tmp_path / "t.zip", tmp_path / "n", ArchiveKind.NONE)


def test_corrupt_archive_raises_read_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.tar.gz"
    broken.write_bytes(b"not a tarball")

    with pytest.raises(ArchiveReadError):
        extract_tar_gz(broken, tmp_path / "out")


def test_cancelled_context_stops_extraction(tmp_path: Path, make_tar) -> None:
    archive = make_tar(tmp_path / "a.tar.gz", {"a.txt": "a"})
    ctx = OperationContext()
    ctx.cancel()

    with pytest.raises(OperationCancelledError):
        extract_tar_gz(archive, tmp_path / "out", ctx=ctx)


def test_flatten_single_directory(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "tool-1.0" / "bin").mkdir(parents=True)
    (root / "tool-1.0" / "bin" / "tool").write_text("t")
    (root / "tool-1.0" / "README").write_text("r")

    assert flatten_single_directory(root) == "tool-1.0"
    assert sorted(entry.name for entry in root.iterdir()) == ["README", "bin"]
    assert (root / "bin" / "tool").read_text() == "t"


def test_flatten_leaves_multiple_entries_alone(tmp_path: Path) -> None:
    (tmp_path / "one").mkdir()
    (tmp_path / "two.txt").write_text("2")

    assert flatten_single_directory(tmp_path) is None
    assert (tmp_path / "one").is_dir()


@pytest.mark.parametrize(
    ("name", "kind"),
    [
        ("tool.tar.gz", ArchiveKind.TAR_GZ),
        ("tool.tgz", ArchiveKind.TAR_GZ),
        ("tool.tar.xz", ArchiveKind.TAR_XZ),
        ("tool.zip", ArchiveKind.ZIP),
        ("tool.gz", ArchiveKind.GZ),
        ("tool", ArchiveKind.NONE),
        ("tool.exe", ArchiveKind.NONE),
    ],
)
def test_archive_kind_detect(name: str, kind: ArchiveKind) -> None:
    assert ArchiveKind.detect(name) is kind


def test_archive_kind_parse() -> None:
    assert ArchiveKind.parse("tgz") is ArchiveKind.TAR_GZ
    assert ArchiveKind.parse(".zip") is ArchiveKind.ZIP
    assert ArchiveKind.parse("") is ArchiveKind.NONE
    with pytest.raises(UnsupportedArchiveKindError):
        ArchiveKind.parse("rar")


def test_limited_writer_shares_budget() -> None:
    limits = ArchiveLimits(max_file_bytes=8, max_total_bytes=12)
    budget = ByteBudget()
    first = LimitedWriter(io.BytesIO(), budget, limits)
    second = LimitedWriter(io.BytesIO(), budget, limits)

    assert first.write(b"12345678") == 8
    with pytest.raises(ArchiveTooLargeError, match="total"):
        second.write(b"123456")
    assert budget.total == 12
    assert second.written == 4
