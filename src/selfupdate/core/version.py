"""Parsing of release tags into semantic versions."""

import logging
import re

import semver

from selfupdate.core.errors import InvalidSemver, UnparsableVersion

logger = logging.getLogger(__name__)

VERSION_CORE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


def parse_version(tag: str) -> semver.Version:
    """Parse a release tag such as ``v1.2.3`` or ``tool-1.2.3-rc.1``.

    The first MAJOR.MINOR.PATCH in the tag starts the version; any text before
    it is a prefix and is dropped. Pre-release and build suffixes after the
    core are kept and follow semver precedence. Leading zeros in the core
    are ignored, so ``v1.02.3`` is 1.2.3.
    """
    match = VERSION_CORE.search(tag)
    if match is None:
        raise UnparsableVersion(f"No version found in tag {tag!r}")

    if match.start() > 0:
        logger.debug("Strip prefix %r from tag %r", tag[: match.start()], tag)

    # semver rejects leading zeros such as 1.02.3
    core = ".".join(str(int(n)) for n in match.groups())
    try:
        return semver.Version.parse(core + tag[match.end():])
    except ValueError as e:
        raise InvalidSemver(f"Tag {tag!r} is not a valid semantic version: {e}") from e
