# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Detect the raw operating system and architecture tokens of the host."""

from __future__ import annotations

import platform
from typing import Final

_ARCH_ALIASES: Final[dict[str, str]] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "i386": "386",
    "i686": "386",
    "386": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
    "ppc64le": "ppc64le",
    "loongarch64": "loong64",
    "loong64": "loong64",
    "riscv64": "riscv64",
    "s390x": "s390x",
}


def normalize_architecture(machine: str) -> str:
    """Return the canonical architecture token for ``machine``.

    Per-tool architecture maps are keyed by these canonical tokens; unknown
    machines pass through lower-cased.
    """

    normalized = machine.strip().lower()
    return _ARCH_ALIASES.get(normalized, normalized)


def host_platform(arch_override: str | None = None) -> tuple[str, str]:
    """Return the raw ``(os, arch)`` pair describing the running host.

    Args:
        arch_override: Optional machine name replacing the detected one.

    Returns:
        tuple[str, str]: Lower-cased system name and canonical architecture.
    """

    system = platform.system().lower() or "unknown"
    machine = arch_override or platform.machine()
    return system, normalize_architecture(machine)


__all__ = ["host_platform", "normalize_architecture"]
