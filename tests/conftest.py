import httpx
import pytest

from selfupdate.core import updater as updater_module
from selfupdate.core.platform import Arch, OS, PlatformInfo
from selfupdate.models.release import RawAsset, RawRelease

LINUX_AMD64 = PlatformInfo(os=OS.LINUX, arch=Arch.AMD64)
WINDOWS_AMD64 = PlatformInfo(os=OS.WINDOWS, arch=Arch.AMD64)


def make_asset(name: str, asset_id: int = 1, size: int = 100) -> RawAsset:
    return RawAsset(
        name=name,
        download_url=f"https://github.com/owner/tool/releases/download/{name}",
        size=size,
        id=asset_id,
    )


def make_release(
    tag: str,
    assets: list[str] | None = None,
    draft: bool = False,
    prerelease: bool = False,
) -> RawRelease:
    if assets is None:
        assets = ["tool_linux_amd64.tar.gz"]
    return RawRelease(
        tag_name=tag,
        name=f"Release {tag}",
        draft=draft,
        prerelease=prerelease,
        assets=[make_asset(name, i + 1) for i, name in enumerate(assets)],
        body=f"Notes for {tag}",
        html_url=f"https://github.com/owner/tool/releases/tag/{tag}",
    )


def release_payload(
    tag: str,
    assets: list[tuple[str, int, int]],
    draft: bool = False,
    prerelease: bool = False,
) -> dict:
    """A release as returned by the GitHub API; assets are (name, id, size)."""
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "draft": draft,
        "prerelease": prerelease,
        "body": f"Notes for {tag}",
        "html_url": f"https://github.com/owner/tool/releases/tag/{tag}",
        "published_at": "2024-03-01T12:00:00Z",
        "assets": [
            {
                "name": name,
                "id": asset_id,
                "size": size,
                "browser_download_url": f"https://github.com/owner/tool/releases/download/{tag}/{name}",
                "content_type": "application/octet-stream",
            }
            for name, asset_id, size in assets
        ],
    }


class FakeGitHub:
    """Serves releases and asset contents for a mock httpx transport."""

    def __init__(self, releases: list[dict] | None = None, status_code: int = 200):
        self.releases = releases or []
        self.status_code = status_code
        self.contents: dict[int, bytes] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/releases"):
            if self.status_code != 200:
                return httpx.Response(self.status_code, json={"message": "error"})
            return httpx.Response(200, json=self.releases)
        if "/releases/assets/" in path:
            asset_id = int(path.rsplit("/", 1)[1])
            if asset_id not in self.contents:
                return httpx.Response(404)
            return httpx.Response(200, content=self.contents[asset_id])
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def linux_platform(monkeypatch):
    monkeypatch.setattr(updater_module, "get_platform_info", lambda: LINUX_AMD64)
    return LINUX_AMD64


@pytest.fixture(autouse=True)
def reset_default_updater():
    updater_module.set_default_updater(None)
    yield
    updater_module.set_default_updater(None)
