# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Boolean literal parsing for environment-sourced settings."""

from __future__ import annotations

from typing import Final

TRUTHY_LITERALS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on", "y"})
FALSY_LITERALS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off", "n", ""})


def coerce_bool_literal(value: str) -> bool:
    """Return the boolean represented by ``value`` or raise ``ValueError``.

    Args:
        value: Raw string such as an environment variable value.

    Returns:
        bool: ``True`` for truthy literals, ``False`` for falsy ones.

    Raises:
        ValueError: If ``value`` is not a recognised literal.
    """

    normalized = value.strip().lower()
    if normalized in TRUTHY_LITERALS:
        return True
    if normalized in FALSY_LITERALS:
        return False
    raise ValueError(f"unsupported boolean literal: {value!r}")


def interpret_optional_bool(value: object | None) -> bool | None:
    """Convert ``value`` into an optional boolean.

    ``None`` stays ``None``. Strings must be recognised literals; other
    objects use Python truthiness.

    Raises:
        ValueError: If a string is not a recognised literal.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return coerce_bool_literal(value)
    return bool(value)


__all__ = ["FALSY_LITERALS", "TRUTHY_LITERALS", "coerce_bool_literal", "interpret_optional_bool"]
