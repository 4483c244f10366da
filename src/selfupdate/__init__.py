"""Self-update of executables from GitHub releases."""

import logging

from selfupdate.core.config import Config
from selfupdate.core.errors import (
    ConfigError,
    DownloadError,
    ExtractionError,
    FetchFailed,
    InstallError,
    InvalidEndpointURL,
    InvalidFilterPattern,
    InvalidSemver,
    NoSuitableRelease,
    RepositoryNotFound,
    SelfUpdateError,
    UnparsableVersion,
    UnsupportedPlatform,
    ValidationAssetMissing,
    ValidationFailed,
    VersionError,
)
from selfupdate.core.log import disable_log, enable_log
from selfupdate.core.updater import (
    Updater,
    default_updater,
    detect_latest,
    detect_version,
    set_default_updater,
    update_command,
    update_self,
)
from selfupdate.core.validate import SHA256Validator, Validator
from selfupdate.models.release import Release

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Config",
    "ConfigError",
    "DownloadError",
    "ExtractionError",
    "FetchFailed",
    "InstallError",
    "InvalidEndpointURL",
    "InvalidFilterPattern",
    "InvalidSemver",
    "NoSuitableRelease",
    "Release",
    "RepositoryNotFound",
    "SHA256Validator",
    "SelfUpdateError",
    "UnparsableVersion",
    "UnsupportedPlatform",
    "Updater",
    "ValidationAssetMissing",
    "ValidationFailed",
    "Validator",
    "VersionError",
    "default_updater",
    "detect_latest",
    "detect_version",
    "disable_log",
    "enable_log",
    "set_default_updater",
    "update_command",
    "update_self",
]
