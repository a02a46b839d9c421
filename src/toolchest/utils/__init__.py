# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Small parsing helpers shared across the engine."""

from __future__ import annotations

from .bool_utils import coerce_bool_literal, interpret_optional_bool

__all__ = ["coerce_bool_literal", "interpret_optional_bool"]
