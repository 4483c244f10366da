"""Release selection and resolution.

Given the releases of a repository, pick the release and asset to install on
this platform and build the :class:`~selfupdate.models.release.Release`
handed to the installer.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

import semver

from selfupdate.core.errors import NoSuitableRelease, ValidationAssetMissing, VersionError
from selfupdate.core.github import GitHubClient
from selfupdate.core.platform import PlatformInfo, find_asset
from selfupdate.core.validate import Validator
from selfupdate.core.version import parse_version
from selfupdate.models.release import RawAsset, RawRelease, Release

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedRelease:
    """A release that was not eligible, and why."""

    tag_name: str
    reason: str


@dataclass(frozen=True)
class Selection:
    """The winning release together with its asset and parsed version."""

    release: RawRelease
    asset: RawAsset
    version: semver.Version


def select_release(
    releases: Sequence[RawRelease],
    version: str,
    platform_info: PlatformInfo,
    filters: Sequence[re.Pattern] = (),
) -> Selection:
    """Choose the release with the greatest version that has a usable asset.

    With an empty ``version`` drafts and pre-releases are ignored. Otherwise
    only the release tagged exactly ``version`` is considered, whatever its
    flags. Releases without a matching asset or a parsable tag are skipped.
    Ties keep the release listed first.
    """
    if not releases:
        raise NoSuitableRelease("No releases found")

    skipped: list[SkippedRelease] = []
    best: Selection | None = None

    for rel in releases:
        if version:
            if rel.tag_name != version:
                continue
        elif rel.draft:
            skipped.append(SkippedRelease(rel.tag_name, "draft"))
            continue
        elif rel.prerelease:
            skipped.append(SkippedRelease(rel.tag_name, "pre-release"))
            continue

        asset = find_asset(rel, platform_info, filters)
        if asset is None:
            skipped.append(SkippedRelease(rel.tag_name, f"no asset for {platform_info}"))
            continue

        try:
            ver = parse_version(rel.tag_name)
        except VersionError as e:
            skipped.append(SkippedRelease(rel.tag_name, str(e)))
            continue

        if best is None or ver > best.version:
            best = Selection(release=rel, asset=asset, version=ver)

    for s in skipped:
        logger.debug("Skip release %s: %s", s.tag_name, s.reason)

    if best is None:
        if version and not skipped:
            raise NoSuitableRelease(f"Release {version!r} not found")
        raise NoSuitableRelease(f"No suitable release found for {platform_info}", skipped)

    logger.info("Selected release %s with asset %s", best.release.tag_name, best.asset.name)
    return best


def find_validation_asset(release: RawRelease, name: str) -> RawAsset | None:
    """Find the asset with exactly the given name."""
    for asset in release.assets:
        if asset.name == name:
            return asset
    return None


def resolve_release(
    client: GitHubClient,
    owner: str,
    repo: str,
    version: str = "",
    *,
    platform_info: PlatformInfo,
    filters: Sequence[re.Pattern] = (),
    validator: Validator | None = None,
) -> Release:
    """Fetch the releases of owner/repo and resolve the one to install.

    An empty ``version`` asks for the latest published release.
    """
    releases = client.list_releases(owner, repo)
    selection = select_release(releases, version, platform_info, filters)
    rel, asset = selection.release, selection.asset

    validation_asset = None
    if validator is not None:
        validation_name = asset.name + validator.suffix()
        validation_asset = find_validation_asset(rel, validation_name)
        if validation_asset is None:
            raise ValidationAssetMissing(
                f"Failed finding validation file {validation_name!r} in release {rel.tag_name!r}"
            )

    return Release(
        version=selection.version,
        asset_url=asset.download_url,
        asset_byte_size=asset.size,
        asset_id=asset.id,
        asset_name=asset.name,
        url=rel.html_url,
        release_notes=rel.body,
        name=rel.name,
        repo_owner=owner,
        repo_name=repo,
        published_at=rel.published_at,
        validation_asset_id=validation_asset.id if validation_asset else None,
        validation_asset_url=validation_asset.download_url if validation_asset else None,
    )
