# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``requests``-backed HTTP transport."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import requests

from .errors import TransportError

LOGGER = logging.getLogger(__name__)

USER_AGENT = "toolchest"


class RequestsResponse:
    """Adapt :class:`requests.Response` to the engine's response protocol.

    Body streaming failures surface as :class:`TransportError`, the same as
    failures while sending the request.
    """

    def __init__(self, response: requests.Response, url: str) -> None:
        self._response = response
        self._url = url
        self.status_code = response.status_code
        self.headers: Mapping[str, str] = response.headers

    @property
    def links(self) -> Mapping[str, Mapping[str, str]]:
        return self._response.links

    @property
    def text(self) -> str:
        try:
            return self._response.text
        except requests.RequestException as exc:
            raise TransportError(f"reading response from {self._url} failed: {exc}") from exc

    def json(self) -> Any:
        try:
            return self._response.json()
        except requests.JSONDecodeError as exc:
            raise TransportError(f"response from {self._url} is not valid JSON: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"reading response from {self._url} failed: {exc}") from exc

    def iter_content(self, chunk_size: int = 65536) -> Iterator[bytes]:
        try:
            yield from self._response.iter_content(chunk_size=chunk_size)
        except requests.RequestException as exc:
            raise TransportError(f"reading response from {self._url} failed: {exc}") from exc

    def close(self) -> None:
        self._response.close()


class RequestsHttpClient:
    """Issue GET requests through a shared :class:`requests.Session`.

    Transport failures (DNS, TLS, connection resets, timeouts) are raised as
    :class:`TransportError` with the ``requests`` exception chained; HTTP
    error statuses are returned for the caller to classify.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self._session = session

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        stream: bool = False,
        timeout: float | None = None,
    ) -> RequestsResponse:
        LOGGER.debug("GET %s", url)
        try:
            response = self._session.get(
                url,
                headers=dict(headers) if headers else None,
                params=dict(params) if params else None,
                stream=stream,
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"request to {url} failed: {exc}") from exc
        return RequestsResponse(response, url)

    def close(self) -> None:
        """Close the underlying session."""

        self._session.close()


__all__ = ["RequestsHttpClient", "RequestsResponse"]
