# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Collaborator ports injected into the engine at construction time."""

from __future__ import annotations

from .http import HttpClient, HttpResponse
from .process import CommandRunner
from .sources import ReleaseAsset, ReleaseSource

__all__ = [
    "CommandRunner",
    "HttpClient",
    "HttpResponse",
    "ReleaseAsset",
    "ReleaseSource",
]
