# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for git-remote tag listing and shallow checkouts."""

from __future__ import annotations

from pathlib import Path
from subprocess import CompletedProcess

import pytest

from toolchest.errors import ExecutableNotFoundError
from toolchest.process_utils import SubprocessExecutionError
from toolchest.sources import GitRemoteTagSource, parse_git_tags_output
from toolchest.vcs import ensure_git_repo

LS_REMOTE = """\
1111111111111111111111111111111111111111\trefs/tags/v1.0.0
2222222222222222222222222222222222222222\trefs/tags/v1.0.0^{}
3333333333333333333333333333333333333333\trefs/tags/v1.1.0
4444444444444444444444444444444444444444\trefs/heads/main
"""


def _completed(args: list[str], *, stdout: str = "", returncode: int = 0) -> CompletedProcess[str]:
    return CompletedProcess(args=args, returncode=returncode, stdout=stdout, stderr="")


def test_parse_git_tags_output_collapses_peeled_refs() -> None:
    assert parse_git_tags_output(LS_REMOTE) == ["v1.0.0", "v1.1.0"]


def test_git_remote_tag_source_runs_ls_remote(ctx, make_runner) -> None:
    runner = make_runner(lambda args, cwd: _completed(args, stdout=LS_REMOTE))
    source = GitRemoteTagSource(runner)

    assert source.list_releases(ctx, "https://git.example/widget.git") == ["v1.0.0", "v1.1.0"]
    assert runner.commands == [["git", "ls-remote", "--tags", "https://git.example/widget.git"]]
    assert source.list_release_assets(ctx, "https://git.example/widget.git", "v1.0.0") == []


def test_ensure_git_repo_clones_missing_checkout(ctx, runner, tmp_path: Path) -> None:
    checkout = tmp_path / "src" / "widget"

    cloned = ensure_git_repo(ctx, runner, checkout, "https://git.example/widget.git", ref="v1.0.0")

    assert cloned
    assert runner.commands == [
        ["git", "clone", "--depth", "1", "--branch", "v1.0.0", "https://git.example/widget.git", str(checkout)],
    ]
    assert checkout.parent.is_dir()


def test_ensure_git_repo_pulls_existing_checkout(ctx, runner, tmp_path: Path) -> None:
    checkout = tmp_path / "widget"
    checkout.mkdir()

    assert not ensure_git_repo(ctx, runner, checkout, "https://git.example/widget.git")
    assert runner.commands == [["git", "-C", str(checkout), "pull", "--ff-only"]]


def test_ensure_git_repo_tolerates_failed_pull(ctx, make_runner, tmp_path: Path) -> None:
    def handler(args, cwd):  # noqa: ANN001
        raise SubprocessExecutionError(args, 1, "", "diverged")

    checkout = tmp_path / "widget"
    checkout.mkdir()

    assert not ensure_git_repo(ctx, make_runner(handler), checkout, "https://git.example/widget.git")


def test_ensure_git_repo_propagates_clone_failure(ctx, make_runner, tmp_path: Path) -> None:
    def handler(args, cwd):  # noqa: ANN001
        raise SubprocessExecutionError(args, 128, "", "repository not found")

    with pytest.raises(SubprocessExecutionError, match="status 128"):
        ensure_git_repo(ctx, make_runner(handler), tmp_path / "widget", "https://git.example/missing.git")


def test_ensure_git_repo_requires_git_on_path(ctx, make_runner, tmp_path: Path) -> None:
    runner = make_runner(missing=["git"])

    with pytest.raises(ExecutableNotFoundError, match="git"):
        ensure_git_repo(ctx, runner, tmp_path / "widget", "https://git.example/widget.git")

    assert runner.commands == []
    assert not (tmp_path / "widget").exists()
