# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Explicit name to plugin mapping assembled at startup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ..errors import ConfigError, UnknownPluginError
from .base import Plugin


class PluginRegistry:
    """Hold the plugins available to an installer."""

    def __init__(self, plugins: Iterable[Plugin] = ()) -> None:
        self._plugins: dict[str, Plugin] = {}
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: Plugin) -> None:
        """Add ``plugin``.

        Raises:
            ConfigError: If another plugin already uses the same name.
        """

        if plugin.name in self._plugins:
            raise ConfigError(f"plugin {plugin.name!r} is registered twice")
        self._plugins[plugin.name] = plugin

    def get(self, name: str) -> Plugin:
        """Return the plugin called ``name``.

        Raises:
            UnknownPluginError: If no such plugin is registered.
        """

        try:
            return self._plugins[name]
        except KeyError:
            raise UnknownPluginError(f"unknown plugin: {name}") from None

    def names(self) -> list[str]:
        return sorted(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[Plugin]:
        return iter(self._plugins[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._plugins)


__all__ = ["PluginRegistry"]
