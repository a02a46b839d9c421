# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interfaces describing where tool versions and release assets come from."""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..context import OperationContext


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    """Downloadable file attached to a published release."""

    name: str
    download_url: str
    size: int = 0
    content_type: str | None = None


@runtime_checkable
class ReleaseSource(Protocol):
    """Enumerate tags, releases and assets of a source repository."""

    @abstractmethod
    def list_tags(self, ctx: OperationContext, repo_url: str) -> list[str]:
        """Return every tag name of ``repo_url`` in source order.

        Args:
            ctx: Cancellation context checked between pages.
            repo_url: Repository URL understood by the source.

        Returns:
            list[str]: Tag names accumulated across all pages.
        """

        raise NotImplementedError

    @abstractmethod
    def list_releases(self, ctx: OperationContext, repo_url: str) -> list[str]:
        """Return the tag names of published releases of ``repo_url``.

        Args:
            ctx: Cancellation context checked between pages.
            repo_url: Repository URL understood by the source.

        Returns:
            list[str]: Release tag names accumulated across all pages.
        """

        raise NotImplementedError

    @abstractmethod
    def list_release_assets(self, ctx: OperationContext, repo_url: str, tag: str) -> list[ReleaseAsset]:
        """Return the assets attached to the release tagged ``tag``.

        Args:
            ctx: Cancellation context checked between pages.
            repo_url: Repository URL understood by the source.
            tag: Release tag name.

        Returns:
            list[ReleaseAsset]: Assets accumulated across all pages.
        """

        raise NotImplementedError


__all__ = ["ReleaseAsset", "ReleaseSource"]
