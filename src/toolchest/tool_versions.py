# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reading and updating ``.tool-versions`` files."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

TOOL_VERSIONS_FILE: Final[str] = ".tool-versions"


def _entries(text: str) -> list[list[str]]:
    entries: list[list[str]] = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        fields = line.split()
        if len(fields) >= 2:
            entries.append(fields)
    return entries


def parse_tool_versions(path: Path) -> dict[str, str]:
    """Load ``tool -> version`` pairs from *path*.

    Only the first version listed for a tool is returned; a missing file
    yields an empty mapping.
    """

    if not path.is_file():
        return {}
    versions: dict[str, str] = {}
    for fields in _entries(path.read_text(encoding="utf-8")):
        versions.setdefault(fields[0], fields[1])
    return versions


def write_tool_versions(path: Path, versions: Mapping[str, str]) -> None:
    """Persist *versions* to *path* sorted by tool name; empty versions are dropped."""

    lines = [f"{name} {version}" for name, version in sorted(versions.items()) if version]
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")


def resolve_tool_versions_path(cwd: Path, home: Path) -> Path:
    """Return ``cwd/.tool-versions`` when it exists, else ``home/.tool-versions``."""

    local = cwd / TOOL_VERSIONS_FILE
    if local.is_file():
        return local
    return home / TOOL_VERSIONS_FILE


def ensure_tool_version_line(path: Path, tool: str, version: str) -> bool:
    """Append ``tool version`` to *path* unless the tool is already listed.

    The file is created when missing.

    Returns:
        bool: ``True`` when a line was appended.
    """

    text = path.read_text(encoding="utf-8") if path.is_file() else ""
    if any(fields[0] == tool for fields in _entries(text)):
        return False
    if text and not text.endswith("\n"):
        text += "\n"
    path.write_text(f"{text}{tool} {version}\n", encoding="utf-8")
    return True


__all__ = [
    "TOOL_VERSIONS_FILE",
    "ensure_tool_version_line",
    "parse_tool_versions",
    "resolve_tool_versions_path",
    "write_tool_versions",
]
