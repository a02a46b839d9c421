# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interfaces describing the HTTP transport used for listings and downloads."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal subset of ``requests.Response`` consumed by the engine."""

    status_code: int
    headers: Mapping[str, str]

    @property
    @abstractmethod
    def links(self) -> Mapping[str, Mapping[str, str]]:
        """Return parsed ``Link`` header relations keyed by ``rel``.

        Returns:
            Mapping[str, Mapping[str, str]]: Relations such as ``next``.
        """

        raise NotImplementedError

    @property
    @abstractmethod
    def text(self) -> str:
        """Return the decoded response body.

        Returns:
            str: Body decoded with the response encoding.
        """

        raise NotImplementedError

    @abstractmethod
    def json(self) -> Any:
        """Return the body parsed as JSON.

        Returns:
            Any: Decoded JSON document.
        """

        raise NotImplementedError

    @abstractmethod
    def iter_content(self, chunk_size: int = 65536) -> Iterator[bytes]:
        """Yield the body in chunks of at most ``chunk_size`` bytes.

        Args:
            chunk_size: Preferred chunk size in bytes.

        Returns:
            Iterator[bytes]: Body chunks in order.
        """

        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""

        raise NotImplementedError


@runtime_checkable
class HttpClient(Protocol):
    """Issue GET requests on behalf of release sources and downloaders."""

    @abstractmethod
    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        stream: bool = False,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Return the response for ``url``.

        Args:
            url: Absolute request URL.
            headers: Optional request headers.
            params: Optional query parameters.
            stream: ``True`` to defer body download until iteration.
            timeout: Optional timeout in seconds.

        Returns:
            HttpResponse: Response object; non-success statuses are not raised.
        """

        raise NotImplementedError


__all__ = ["HttpClient", "HttpResponse"]
