# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing progress messages with optional colour and emoji support."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, get_console_manager


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
    console: Console | None = None,
) -> None:
    color_enabled = detect_tty() if use_color is None else use_color
    target = console or get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    target.print(text)


def section(title: str, *, use_color: bool, console: Console | None = None) -> None:
    """Render a section header.

    Args:
        title: Header text.
        use_color: Whether a Rich rule may be drawn.
        console: Optional console overriding the shared one.
    """

    target = console or get_console_manager().get(color=use_color, emoji=True)
    if use_color:
        target.print()
        target.print(Rule(title))
    else:
        target.print(f"\n--- {title} ---")


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None, console: Console | None = None) -> None:
    """Emit an informational message."""

    prefix = emoji("ℹ️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color, console=console)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None, console: Console | None = None) -> None:
    """Emit a success message."""

    prefix = emoji("✅ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="green", use_emoji=use_emoji, use_color=use_color, console=console)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None, console: Console | None = None) -> None:
    """Emit a warning message."""

    prefix = emoji("⚠️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color, console=console)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None, console: Console | None = None) -> None:
    """Emit an error message."""

    prefix = emoji("❌ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="red", use_emoji=use_emoji, use_color=use_color, console=console)


@dataclass(frozen=True, slots=True)
class Reporter:
    """Progress sink bound to one set of presentation flags.

    Plugins and the installer receive a reporter instead of printing directly,
    so ``quiet`` silences every progress line at once.
    """

    quiet: bool = False
    use_color: bool = True
    use_emoji: bool = True
    console: Console | None = None

    @classmethod
    def silent(cls) -> Reporter:
        """Return a reporter that prints nothing."""

        return cls(quiet=True)

    def section(self, title: str) -> None:
        if not self.quiet:
            section(title, use_color=self.use_color, console=self.console)

    def info(self, msg: str) -> None:
        if not self.quiet:
            info(msg, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def ok(self, msg: str) -> None:
        if not self.quiet:
            ok(msg, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def warn(self, msg: str) -> None:
        if not self.quiet:
            warn(msg, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def fail(self, msg: str) -> None:
        if not self.quiet:
            fail(msg, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)


__all__ = ["Reporter", "emoji", "fail", "info", "ok", "section", "warn"]
