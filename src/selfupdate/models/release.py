"""GitHub release data models."""

from dataclasses import dataclass, field
from datetime import datetime

import semver


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    # GitHub uses a trailing Z, which fromisoformat only accepts on 3.11+
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class RawAsset:
    """Represents a GitHub release asset as listed by the API."""

    name: str
    download_url: str
    size: int
    id: int

    @classmethod
    def from_api_response(cls, data: dict) -> "RawAsset":
        """Create RawAsset from GitHub API response."""
        return cls(
            name=data["name"],
            download_url=data.get("browser_download_url", ""),
            size=data.get("size", 0),
            id=data["id"],
        )


@dataclass
class RawRelease:
    """Represents a GitHub release as listed by the API."""

    tag_name: str
    name: str
    draft: bool
    prerelease: bool
    assets: list[RawAsset] = field(default_factory=list)
    published_at: datetime | None = None
    body: str = ""
    html_url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "RawRelease":
        """Create RawRelease from GitHub API response."""
        assets = [RawAsset.from_api_response(a) for a in data.get("assets", [])]
        return cls(
            tag_name=data["tag_name"],
            name=data.get("name") or "",
            draft=data.get("draft", False),
            prerelease=data.get("prerelease", False),
            assets=assets,
            published_at=_parse_timestamp(data.get("published_at")),
            body=data.get("body") or "",
            html_url=data.get("html_url", ""),
        )


@dataclass(frozen=True)
class Release:
    """A resolved release: the asset to install and where it came from.

    ``validation_asset_id`` is None when no validator was configured.
    """

    version: semver.Version
    asset_url: str
    asset_byte_size: int
    asset_id: int
    asset_name: str
    url: str
    release_notes: str
    name: str
    repo_owner: str
    repo_name: str
    published_at: datetime | None = None
    validation_asset_id: int | None = None
    validation_asset_url: str | None = None

    @property
    def slug(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"
