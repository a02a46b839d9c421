# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for progress reporting."""

from __future__ import annotations

import io

from rich.console import Console

from toolchest.console import RichConsoleManager, get_console_manager
from toolchest.reporting import Reporter, emoji


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=False, color_system=None, width=120), buffer


def test_reporter_prints_plain_lines() -> None:
    console, buffer = _console()
    reporter = Reporter(use_color=False, use_emoji=False, console=console)

    reporter.section("jq 1.7.1")
    reporter.info("Downloading jq")
    reporter.ok("jq installed")
    reporter.warn("slow mirror")
    reporter.fail("boom")

    lines = buffer.getvalue().splitlines()
    assert "--- jq 1.7.1 ---" in lines
    assert lines[-4:] == ["Downloading jq", "jq installed", "slow mirror", "boom"]


def test_reporter_emoji_prefixes() -> None:
    console, buffer = _console()

    Reporter(use_color=False, use_emoji=True, console=console).ok("done")

    assert buffer.getvalue().startswith("✅")


def test_quiet_reporter_is_silent() -> None:
    console, buffer = _console()
    reporter = Reporter(quiet=True, console=console)

    reporter.section("x")
    reporter.info("x")
    reporter.fail("x")

    assert buffer.getvalue() == ""
    assert Reporter.silent().quiet


def test_emoji_helper() -> None:
    assert emoji("✅", True) == "✅"
    assert emoji("✅", False) == ""


def test_console_manager_caches_consoles() -> None:
    manager = RichConsoleManager()

    assert manager.get(color=False, emoji=False) is manager.get(color=False, emoji=False)
    assert get_console_manager() is get_console_manager()
