# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin contract and the two installation strategies."""

from __future__ import annotations

from .base import Plugin, PluginServices
from .binary import BinaryPlugin
from .config import (
    BinaryPluginConfig,
    BuildHook,
    HookContext,
    PluginConfig,
    PluginHelp,
    SourceBuildPluginConfig,
    SourceURLResolver,
)
from .registry import PluginRegistry
from .source_build import SourceBuildPlugin

__all__ = [
    "BinaryPlugin",
    "BinaryPluginConfig",
    "BuildHook",
    "HookContext",
    "Plugin",
    "PluginConfig",
    "PluginHelp",
    "PluginRegistry",
    "PluginServices",
    "SourceBuildPlugin",
    "SourceBuildPluginConfig",
    "SourceURLResolver",
]
