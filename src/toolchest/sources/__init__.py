# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concrete release sources."""

from __future__ import annotations

from .git import GitRemoteTagSource, parse_git_tags_output
from .github import GitHubReleaseSource, parse_owner_repo

__all__ = ["GitHubReleaseSource", "GitRemoteTagSource", "parse_git_tags_output", "parse_owner_repo"]
