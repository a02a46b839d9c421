# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fetch remote artifacts to disk without leaving partial files behind."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from .context import OperationContext
from .errors import DownloadFailedError
from .fsutils import ensure_dir
from .interfaces.http import HttpClient

LOGGER = logging.getLogger(__name__)

DOWNLOAD_CHUNK_BYTES: Final[int] = 64 << 10
HTTP_OK: Final[int] = 200
_ERROR_DETAIL_CHARS: Final[int] = 200


def _error_detail(text: str) -> str | None:
    detail = text.strip()
    if not detail:
        return None
    return detail[:_ERROR_DETAIL_CHARS]


def download_file(
    ctx: OperationContext,
    http: HttpClient,
    url: str,
    dest: Path,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> int:
    """Stream ``url`` to ``dest`` through a sibling temporary file.

    The body is written to a temporary file in ``dest``'s directory and renamed
    into place only after the whole body arrived, so ``dest`` either holds a
    complete artifact or is left untouched.

    Args:
        ctx: Cancellation context checked between chunks.
        http: Transport used for the request.
        url: Artifact URL.
        dest: Final path of the artifact.
        headers: Optional request headers.
        timeout: Optional per-request timeout in seconds.

    Returns:
        int: Number of bytes written.

    Raises:
        DownloadFailedError: If the server answers with a non-200 status.
        TransportError: If the transfer itself fails.
        OperationCancelledError: If ``ctx`` is cancelled mid-transfer.
    """

    ctx.check()
    ensure_dir(dest.parent)
    response = http.get(url, headers=headers, stream=True, timeout=timeout)
    try:
        if response.status_code != HTTP_OK:
            raise DownloadFailedError(url, response.status_code)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".part", dir=dest.parent)
        tmp_path = Path(tmp_name)
        written = 0
        try:
            with os.fdopen(fd, "wb") as handle:
                for chunk in response.iter_content(DOWNLOAD_CHUNK_BYTES):
                    ctx.check()
                    if chunk:
                        handle.write(chunk)
                        written += len(chunk)
            os.replace(tmp_path, dest)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
    finally:
        response.close()
    LOGGER.debug("downloaded %s (%d bytes) to %s", url, written, dest)
    return written


def download_text(
    ctx: OperationContext,
    http: HttpClient,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> str:
    """Return the body of a small text resource such as a checksum file.

    Raises:
        DownloadFailedError: If the server answers with a non-200 status.
    """

    ctx.check()
    response = http.get(url, headers=headers, timeout=timeout)
    try:
        if response.status_code != HTTP_OK:
            raise DownloadFailedError(url, response.status_code, _error_detail(response.text))
        return response.text
    finally:
        response.close()


def is_cached(path: Path, min_size: int) -> bool:
    """Return ``True`` when ``path`` is a file larger than ``min_size`` bytes."""

    try:
        return path.is_file() and path.stat().st_size > min_size
    except OSError:
        return False


__all__ = ["DOWNLOAD_CHUNK_BYTES", "download_file", "download_text", "is_cached"]
