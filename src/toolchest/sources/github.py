# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Release source backed by the GitHub REST API."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any, Final

from ..context import OperationContext
from ..errors import DownloadFailedError, InvalidRepositoryURLError, TransportError
from ..interfaces.http import HttpClient
from ..interfaces.sources import ReleaseAsset

LOGGER = logging.getLogger(__name__)

API_VERSION: Final[str] = "2022-11-28"
DEFAULT_API_URL: Final[str] = "https://api.github.com"
PAGE_SIZE: Final[int] = 100
HTTP_OK: Final[int] = 200

_REPO_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^https?://github\.com/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$"),
    re.compile(r"^git@github\.com:(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?$"),
)


def parse_owner_repo(url: str) -> tuple[str, str]:
    """Split a GitHub repository URL into ``(owner, repo)``.

    Accepts ``https://github.com/<owner>/<repo>`` and the SSH form
    ``git@github.com:<owner>/<repo>``, either with a ``.git`` suffix.

    Raises:
        InvalidRepositoryURLError: For any other shape.
    """

    candidate = url.strip()
    for pattern in _REPO_PATTERNS:
        match = pattern.match(candidate)
        if match:
            return match.group("owner"), match.group("repo")
    raise InvalidRepositoryURLError(f"invalid GitHub repository URL: {url}")


class GitHubReleaseSource:
    """List tags, releases and release assets through the GitHub API.

    Every listing follows ``Link: rel="next"`` until the API stops offering a
    next page. Any failed page aborts the whole listing.
    """

    def __init__(
        self,
        http: HttpClient,
        *,
        api_url: str = DEFAULT_API_URL,
        token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a source talking to ``api_url``.

        Args:
            http: Transport used for every request.
            api_url: API root, overridable for GitHub Enterprise or test servers.
            token: Optional bearer token raising the rate limit.
            timeout: Optional per-request timeout in seconds.
        """

        self._http = http
        self._api_url = api_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _paginate(self, ctx: OperationContext, url: str, *, what: str) -> Iterator[Any]:
        next_url: str | None = url
        params: dict[str, str] | None = {"per_page": str(PAGE_SIZE)}
        while next_url:
            ctx.check()
            response = self._http.get(next_url, headers=self._headers(), params=params, timeout=self._timeout)
            try:
                if response.status_code != HTTP_OK:
                    raise DownloadFailedError(next_url, response.status_code, f"fetching {what}")
                payload = response.json()
                link = response.links.get("next")
            finally:
                response.close()
            if not isinstance(payload, list):
                raise TransportError(f"unexpected payload while fetching {what} from {next_url}")
            yield from payload
            next_url = link.get("url") if link else None
            # the next link already carries the query string
            params = None

    def _get_json(self, ctx: OperationContext, url: str, *, what: str) -> Any:
        ctx.check()
        response = self._http.get(url, headers=self._headers(), timeout=self._timeout)
        try:
            if response.status_code != HTTP_OK:
                raise DownloadFailedError(url, response.status_code, f"fetching {what}")
            return response.json()
        finally:
            response.close()

    def _repo_url(self, repo_url: str) -> str:
        owner, repo = parse_owner_repo(repo_url)
        return f"{self._api_url}/repos/{owner}/{repo}"

    def list_tags(self, ctx: OperationContext, repo_url: str) -> list[str]:
        """Return every tag name of ``repo_url`` in API order."""

        base = self._repo_url(repo_url)
        tags = [str(item["name"]) for item in self._paginate(ctx, f"{base}/tags", what="tags") if "name" in item]
        LOGGER.debug("fetched %d tags for %s", len(tags), repo_url)
        return tags

    def list_releases(self, ctx: OperationContext, repo_url: str) -> list[str]:
        """Return tag names of non-draft releases of ``repo_url``."""

        base = self._repo_url(repo_url)
        releases = [
            str(item["tag_name"])
            for item in self._paginate(ctx, f"{base}/releases", what="releases")
            if item.get("tag_name") and not item.get("draft", False)
        ]
        LOGGER.debug("fetched %d releases for %s", len(releases), repo_url)
        return releases

    def list_release_assets(self, ctx: OperationContext, repo_url: str, tag: str) -> list[ReleaseAsset]:
        """Return the assets attached to the release tagged ``tag``."""

        base = self._repo_url(repo_url)
        release = self._get_json(ctx, f"{base}/releases/tags/{tag}", what=f"release {tag}")
        release_id = release.get("id") if isinstance(release, dict) else None
        if release_id is None:
            raise TransportError(f"release {tag} of {repo_url} has no id")
        return [
            ReleaseAsset(
                name=str(item["name"]),
                download_url=str(item["browser_download_url"]),
                size=int(item.get("size") or 0),
                content_type=item.get("content_type"),
            )
            for item in self._paginate(ctx, f"{base}/releases/{release_id}/assets", what=f"assets of {tag}")
            if "name" in item and "browser_download_url" in item
        ]


__all__ = ["API_VERSION", "GitHubReleaseSource", "parse_owner_repo"]
