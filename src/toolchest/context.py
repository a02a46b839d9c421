# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cancellation context threaded through every long-running operation."""

from __future__ import annotations

import time
from threading import Event

from .errors import OperationCancelledError


class OperationContext:
    """Carry a cancellation flag and an optional monotonic deadline.

    The context is the only suspension-point contract the engine relies on:
    HTTP streaming, archive extraction, pagination and subprocess launches all
    call :meth:`check` between units of work so a cancelled operation stops
    promptly. Partially written files are left in place.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        """Create a context that expires after ``timeout`` seconds when given.

        Args:
            timeout: Optional budget in seconds measured from construction.
        """

        self._event = Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def background(cls) -> OperationContext:
        """Return a context that is never cancelled unless asked to be."""

        return cls()

    def cancel(self) -> None:
        """Request cancellation of every operation observing this context."""

        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return ``True`` once cancelled or past the deadline."""

        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Return seconds left before the deadline, or ``None`` when unbounded."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise :class:`OperationCancelledError` when the context is done.

        Raises:
            OperationCancelledError: If the context was cancelled or expired.
        """

        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelledError("operation deadline exceeded")


__all__ = ["OperationContext"]
