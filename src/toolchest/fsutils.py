# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem helpers shared by downloads, extraction and plugin strategies."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path
from typing import Final

DIRECTORY_MODE: Final[int] = 0o755
EXECUTABLE_MODE: Final[int] = 0o755
PRIVATE_FILE_MODE: Final[int] = 0o600


def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents when missing and return it."""

    path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    return path


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree; absent paths are ignored."""

    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def make_executable(path: Path) -> None:
    """Set executable permissions on ``path`` for user/group/other."""

    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def replace_contents(source_dir: Path, target_dir: Path) -> list[str]:
    """Move every entry of ``source_dir`` into ``target_dir``, replacing clashes.

    Args:
        source_dir: Directory whose children are moved.
        target_dir: Directory receiving the children.

    Returns:
        list[str]: Names of the moved entries.
    """

    ensure_dir(target_dir)
    moved: list[str] = []
    for child in sorted(source_dir.iterdir()):
        destination = target_dir / child.name
        remove_path(destination)
        os.replace(child, destination)
        moved.append(child.name)
    return moved


def is_within(path: Path | str, root: Path | str) -> bool:
    """Return ``True`` when ``path`` equals ``root`` or lies lexically inside it."""

    clean_root = os.path.normpath(os.fspath(root))
    clean_path = os.path.normpath(os.fspath(path))
    if clean_path == clean_root:
        return True
    return clean_path.startswith(clean_root.rstrip(os.sep) + os.sep)


__all__ = [
    "DIRECTORY_MODE",
    "EXECUTABLE_MODE",
    "PRIVATE_FILE_MODE",
    "ensure_dir",
    "is_within",
    "make_executable",
    "remove_path",
    "replace_contents",
]
