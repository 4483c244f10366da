"""The Updater: detection of new releases and installation of them."""

import logging
import re
import sys
from pathlib import Path

import httpx
import semver

from selfupdate.core.config import Config
from selfupdate.core.detect import resolve_release
from selfupdate.core.downloader import download_asset
from selfupdate.core.errors import InvalidFilterPattern
from selfupdate.core.extractor import decompress_command
from selfupdate.core.github import GitHubClient
from selfupdate.core.install import replace_executable
from selfupdate.core.platform import OS, PlatformInfo, get_platform_info
from selfupdate.core.version import parse_version
from selfupdate.models.release import Release

logger = logging.getLogger(__name__)


def compile_filters(patterns: tuple[str, ...]) -> tuple[re.Pattern, ...]:
    """Compile asset name filters."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise InvalidFilterPattern(
                f'Could not compile regular expression "{pattern}" for filtering releases: {e}'
            ) from e
    return tuple(compiled)


def executable_path() -> Path:
    """Path of the running executable."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


class Updater:
    """Detects and installs releases of GitHub repositories.

    An Updater is immutable once built and can be shared between threads as
    long as its HTTP transport can.
    """

    def __init__(
        self,
        config: Config | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        config = config or Config()
        self.config = config
        self.filters = compile_filters(config.filters)
        self.validator = config.validator
        self.platform: PlatformInfo = get_platform_info()
        self.client = GitHubClient(
            token=config.api_token,
            base_url=config.enterprise_base_url,
            upload_url=config.enterprise_upload_url,
            timeout=config.timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self.client.close()

    def detect_latest(self, owner: str, name: str) -> Release:
        """Detect the latest release of owner/name for this platform.

        Drafts and pre-releases are ignored. Assets must end with the OS and
        architecture such as ``foo_linux_amd64`` or ``foo-darwin-arm64``,
        optionally followed by a compression extension (``.zip``,
        ``.tar.gz``, ``.tgz``, ``.gzip``, ``.gz``, ``.tar.xz``, ``.xz``). On
        Windows ``.exe`` may come before it, as in ``foo_windows_amd64.exe.zip``.
        """
        return self.detect_version(owner, name, "")

    def detect_version(self, owner: str, name: str, version: str) -> Release:
        """Detect the release of owner/name tagged exactly ``version``.

        An empty ``version`` means the latest release.
        """
        return resolve_release(
            self.client,
            owner,
            name,
            version,
            platform_info=self.platform,
            filters=self.filters,
            validator=self.validator,
        )

    def update_to(self, release: Release, cmd_path: str | Path, show_progress: bool = True) -> None:
        """Download the release asset and install it over ``cmd_path``."""
        cmd_path = Path(cmd_path)
        data = download_asset(
            self.client,
            release.repo_owner,
            release.repo_name,
            release.asset_id,
            size=release.asset_byte_size,
            description=release.asset_name,
            show_progress=show_progress,
        )

        if self.validator is not None and release.validation_asset_id is not None:
            validation_data = download_asset(
                self.client,
                release.repo_owner,
                release.repo_name,
                release.validation_asset_id,
                show_progress=False,
            )
            self.validator.validate(data, validation_data)
            logger.info("Validated %s", release.asset_name)

        cmd = cmd_path.name
        if cmd.endswith(".exe"):
            cmd = cmd[: -len(".exe")]

        exe = decompress_command(data, release.asset_name, cmd, self.platform.os)
        replace_executable(cmd_path, exe)

    def update_command(
        self,
        cmd_path: str | Path,
        current: semver.Version | str,
        owner: str,
        name: str,
        show_progress: bool = True,
    ) -> Release:
        """Update the executable at ``cmd_path`` if a newer release exists.

        Returns the latest release, which is the current one when nothing was
        installed.
        """
        cmd_path = Path(cmd_path)
        if self.platform.os is OS.WINDOWS and cmd_path.suffix != ".exe":
            cmd_path = cmd_path.with_name(cmd_path.name + ".exe")
        if isinstance(current, str):
            current = parse_version(current)

        latest = self.detect_latest(owner, name)
        if latest.version <= current:
            logger.info("Current version %s is the latest, nothing to update", current)
            return latest

        logger.info("Updating %s from %s to %s", cmd_path, current, latest.version)
        self.update_to(latest, cmd_path, show_progress=show_progress)
        return latest

    def update_self(
        self, current: semver.Version | str, owner: str, name: str, show_progress: bool = True
    ) -> Release:
        """Update the running executable."""
        return self.update_command(executable_path(), current, owner, name, show_progress)


# Default updater, created on first use
_default: Updater | None = None


def default_updater() -> Updater:
    """Get the default updater, configured from the environment."""
    global _default
    if _default is None:
        _default = Updater(Config.from_environment())
    return _default


def set_default_updater(updater: Updater | None) -> None:
    """Set a custom default updater (useful for testing); None resets it."""
    global _default
    _default = updater


def detect_latest(owner: str, name: str) -> Release:
    """Detect the latest release with the default updater."""
    return default_updater().detect_latest(owner, name)


def detect_version(owner: str, name: str, version: str) -> Release:
    """Detect the given release with the default updater."""
    return default_updater().detect_version(owner, name, version)


def update_command(cmd_path: str | Path, current: semver.Version | str, owner: str, name: str) -> Release:
    """Update an executable with the default updater."""
    return default_updater().update_command(cmd_path, current, owner, name)


def update_self(current: semver.Version | str, owner: str, name: str) -> Release:
    """Update the running executable with the default updater."""
    return default_updater().update_self(current, owner, name)
