# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interfaces describing subprocess execution for hooks and VCS checkouts."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..context import OperationContext


@runtime_checkable
class CommandRunner(Protocol):
    """Run external commands without a shell."""

    @abstractmethod
    def run(
        self,
        ctx: OperationContext,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        capture_output: bool = False,
    ) -> CompletedProcess[str]:
        """Execute ``args`` and return the completed process.

        Args:
            ctx: Cancellation context; checked before launch and bounds the timeout.
            args: Command and arguments.
            cwd: Optional working directory.
            env: Optional full environment for the child.
            check: Raise on non-zero exit when ``True``.
            capture_output: Capture stdout/stderr as text when ``True``.

        Returns:
            CompletedProcess[str]: Result of the execution.
        """

        raise NotImplementedError

    @abstractmethod
    def which(self, name: str) -> str | None:
        """Return the absolute path of ``name`` on ``PATH`` when available.

        Args:
            name: Executable name.

        Returns:
            str | None: Resolved path or ``None``.
        """

        raise NotImplementedError


__all__ = ["CommandRunner"]
