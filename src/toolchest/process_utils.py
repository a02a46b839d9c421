# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import shutil

# Bandit: subprocess usage is intentional; build hooks and VCS checkouts run
# through this wrapper with argument lists and never ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .context import OperationContext
from .errors import ToolchestError

if TYPE_CHECKING:
    from subprocess import CompletedProcess as _CompletedProcess  # nosec B404

LOGGER = logging.getLogger(__name__)

TIMEOUT_RETURNCODE: Final[int] = 124


class SubprocessExecutionError(ToolchestError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute() or (len(head_path.parts) > 1 and head_path.exists()):
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    capture_output: bool = False,
    timeout: float | None = None,
) -> _CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    A timeout is reported as exit status ``124`` with an explanatory line
    appended to stderr, mirroring coreutils ``timeout``.

    Args:
        args: Command and arguments.
        cwd: Optional working directory.
        env: Optional full environment for the child.
        check: Raise :class:`SubprocessExecutionError` on a non-zero exit.
        capture_output: Capture stdout and stderr as text.
        timeout: Optional timeout in seconds.

    Returns:
        CompletedProcess[str]: Result of the execution.

    Raises:
        SubprocessExecutionError: If ``check`` is set and the command failed.
        FileNotFoundError: If the executable cannot be located.
    """

    normalized = _normalize_args(args)
    LOGGER.debug("running %s", " ".join(normalized))
    try:
        completed: _CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            check=False,
            capture_output=capture_output,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out"
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=_ensure_text(exc.stdout) or "",
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )

    if check and completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            completed.stdout if isinstance(completed.stdout, str) else None,
            completed.stderr if isinstance(completed.stderr, str) else None,
        )
    return completed


class SubprocessRunner:
    """:class:`~toolchest.interfaces.process.CommandRunner` backed by :func:`run_command`."""

    def run(
        self,
        ctx: OperationContext,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        capture_output: bool = False,
    ) -> _CompletedProcess[str]:
        """Run ``args`` once ``ctx`` confirms the operation is still live.

        The remaining time of ``ctx`` bounds the child's runtime.
        """

        ctx.check()
        return run_command(
            args,
            cwd=cwd,
            env=env,
            check=check,
            capture_output=capture_output,
            timeout=ctx.remaining(),
        )

    def which(self, name: str) -> str | None:
        return shutil.which(name)


__all__ = ["SubprocessExecutionError", "SubprocessRunner", "TIMEOUT_RETURNCODE", "run_command"]
