"""GitHub API client for fetching releases."""

import logging
import re
from contextlib import contextmanager
from collections.abc import Iterator
from urllib.parse import urlsplit

import httpx

from selfupdate.core.errors import (
    DownloadError,
    FetchFailed,
    InvalidEndpointURL,
    RepositoryNotFound,
)
from selfupdate.models.release import RawRelease

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com/"


def parse_repo_spec(spec: str) -> tuple[str, str]:
    """Parse a repo spec into (owner, repo).

    Accepts:
    - owner/repo
    - https://github.com/owner/repo
    - github.com/owner/repo
    """
    # Handle full URLs
    url_pattern = r"(?:https?://)?github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"
    match = re.match(url_pattern, spec)
    if match:
        return match.group(1), match.group(2)

    # Handle owner/repo format
    parts = spec.split("/")
    if len(parts) == 2 and all(parts):
        return parts[0], parts[1]

    raise ValueError(f"Invalid repo spec: {spec}. Use 'owner/repo' or GitHub URL.")


def _check_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidEndpointURL(f"Invalid GitHub Enterprise URL: {url!r}")
    return url if url.endswith("/") else url + "/"


def enterprise_urls(base_url: str, upload_url: str = "") -> tuple[str, str]:
    """Build API and upload endpoints of a GitHub Enterprise server.

    ``https://github.company.com/`` becomes
    ``https://github.company.com/api/v3/`` and, unless an upload URL is given,
    ``https://github.company.com/api/uploads/``.
    """
    base = _check_url(base_url)
    upload = _check_url(upload_url) if upload_url else base

    if not base.endswith("/api/v3/"):
        base += "api/v3/"
    if not upload.endswith("/api/uploads/"):
        upload += "api/uploads/"
    return base, upload


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(
        self,
        token: str = "",
        base_url: str = "",
        upload_url: str = "",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if base_url:
            self.base_url, self.upload_url = enterprise_urls(base_url, upload_url)
        else:
            self.base_url, self.upload_url = GITHUB_API_BASE, "https://uploads.github.com/"

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self.client.close()

    def list_releases(self, owner: str, repo: str, per_page: int = 30) -> list[RawRelease]:
        """Get releases for a repository, drafts and pre-releases included."""
        try:
            response = self.client.get(
                f"repos/{owner}/{repo}/releases",
                params={"per_page": per_page},
            )
        except httpx.HTTPError as e:
            raise FetchFailed(f"Failed to fetch releases of {owner}/{repo}: {e}") from e

        if response.status_code == 404:
            raise RepositoryNotFound(f"Repository or release not found: {owner}/{repo}")
        if response.status_code == 403:
            raise FetchFailed("GitHub API rate limit exceeded")
        try:
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            raise FetchFailed(f"Failed to fetch releases of {owner}/{repo}: {e}") from e
        if not isinstance(payload, list):
            raise FetchFailed(f"Unexpected release list of {owner}/{repo}: {payload!r:.200}")

        releases = [RawRelease.from_api_response(data) for data in payload]
        logger.debug("Fetched %d releases of %s/%s", len(releases), owner, repo)
        return releases

    @contextmanager
    def open_asset(self, owner: str, repo: str, asset_id: int) -> Iterator[httpx.Response]:
        """Stream a release asset through the API, which also serves private repos."""
        url = f"repos/{owner}/{repo}/releases/assets/{asset_id}"
        try:
            with self.client.stream(
                "GET", url, headers={"Accept": "application/octet-stream"}
            ) as response:
                if response.status_code != 200:
                    raise DownloadError(
                        f"Failed to download asset {asset_id} of {owner}/{repo}: "
                        f"HTTP {response.status_code}"
                    )
                yield response
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download asset {asset_id} of {owner}/{repo}: {e}") from e
