# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shallow git checkouts used by source builds."""

from __future__ import annotations

import logging
from pathlib import Path

from .context import OperationContext
from .errors import ExecutableNotFoundError
from .fsutils import ensure_dir
from .interfaces.process import CommandRunner
from .process_utils import SubprocessExecutionError

LOGGER = logging.getLogger(__name__)


def ensure_git_repo(
    ctx: OperationContext,
    runner: CommandRunner,
    repo_path: Path,
    git_url: str,
    *,
    ref: str | None = None,
    git: str = "git",
) -> bool:
    """Clone ``git_url`` into ``repo_path`` or refresh an existing checkout.

    A missing checkout is created with a depth-one clone (of ``ref`` when
    given); clone failures propagate. An existing checkout gets a best-effort
    ``pull --ff-only`` whose failure is only logged.

    Args:
        ctx: Cancellation context.
        runner: Command runner executing git.
        repo_path: Checkout directory.
        git_url: Remote URL.
        ref: Optional branch or tag to clone.
        git: Git executable name.

    Returns:
        bool: ``True`` when a fresh clone was made.

    Raises:
        ExecutableNotFoundError: If ``git`` is not on ``PATH``.
        SubprocessExecutionError: If the clone fails.
    """

    if runner.which(git) is None:
        raise ExecutableNotFoundError(f"{git} is required to check out {git_url} but was not found on PATH")
    if repo_path.exists():
        try:
            runner.run(ctx, [git, "-C", str(repo_path), "pull", "--ff-only"], capture_output=True)
        except SubprocessExecutionError as exc:
            LOGGER.warning("could not update %s: %s", repo_path, exc)
        return False

    ensure_dir(repo_path.parent)
    args = [git, "clone", "--depth", "1"]
    if ref:
        args.extend(["--branch", ref])
    args.extend([git_url, str(repo_path)])
    runner.run(ctx, args, capture_output=True)
    LOGGER.debug("cloned %s into %s", git_url, repo_path)
    return True


__all__ = ["ensure_git_repo"]
