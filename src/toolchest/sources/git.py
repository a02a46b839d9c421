# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Release source that reads tags straight from a git remote."""

from __future__ import annotations

import logging
import re
from typing import Final

from ..context import OperationContext
from ..interfaces.process import CommandRunner
from ..interfaces.sources import ReleaseAsset

LOGGER = logging.getLogger(__name__)

_TAG_REF: Final[re.Pattern[str]] = re.compile(r"refs/tags/([^\s^{}]+)")


def parse_git_tags_output(output: str) -> list[str]:
    """Extract tag names from ``git ls-remote --tags`` output.

    Peeled ``^{}`` entries collapse onto their tag and duplicates are dropped;
    first-seen order is kept.
    """

    tags: dict[str, None] = {}
    for line in output.splitlines():
        match = _TAG_REF.search(line)
        if match:
            tags.setdefault(match.group(1), None)
    return list(tags)


class GitRemoteTagSource:
    """List versions of any git remote without a hosting API.

    Releases are the same as tags; assets are not available.
    """

    def __init__(self, runner: CommandRunner, *, git: str = "git") -> None:
        self._runner = runner
        self._git = git

    def list_tags(self, ctx: OperationContext, repo_url: str) -> list[str]:
        completed = self._runner.run(
            ctx,
            [self._git, "ls-remote", "--tags", repo_url],
            capture_output=True,
        )
        tags = parse_git_tags_output(completed.stdout or "")
        LOGGER.debug("git ls-remote returned %d tags for %s", len(tags), repo_url)
        return tags

    def list_releases(self, ctx: OperationContext, repo_url: str) -> list[str]:
        return self.list_tags(ctx, repo_url)

    def list_release_assets(self, ctx: OperationContext, repo_url: str, tag: str) -> list[ReleaseAsset]:
        del ctx, repo_url, tag
        return []


__all__ = ["GitRemoteTagSource", "parse_git_tags_output"]
