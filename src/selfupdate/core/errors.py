"""Exceptions raised while detecting and installing releases."""


class SelfUpdateError(Exception):
    """Base class for all selfupdate errors."""

    pass


class RepositoryNotFound(SelfUpdateError):
    """The repository (or its releases) does not exist on the host."""

    pass


class FetchFailed(SelfUpdateError):
    """Fetching the release list failed for any reason other than 404."""

    pass


class NoSuitableRelease(SelfUpdateError):
    """No release passed filtering, asset matching and version parsing."""

    def __init__(self, message: str, skipped: list | None = None):
        self.skipped = list(skipped or [])
        if self.skipped:
            reasons = "; ".join(f"{s.tag_name}: {s.reason}" for s in self.skipped)
            message = f"{message} ({reasons})"
        super().__init__(message)


class VersionError(SelfUpdateError):
    """A release tag did not yield an orderable version."""

    pass


class UnparsableVersion(VersionError):
    """The tag contains no MAJOR.MINOR.PATCH core."""

    pass


class InvalidSemver(VersionError):
    """The tag contains a version core but is not valid semver."""

    pass


class ValidationAssetMissing(SelfUpdateError):
    """A validator is configured but the release has no companion file."""

    pass


class InvalidFilterPattern(SelfUpdateError):
    """A configured asset filter is not a valid regular expression."""

    pass


class InvalidEndpointURL(SelfUpdateError):
    """An enterprise endpoint is not a well-formed URL."""

    pass


class DownloadError(SelfUpdateError):
    """Error during download."""

    pass


class ValidationFailed(SelfUpdateError):
    """The downloaded asset does not match its validation file."""

    pass


class ExtractionError(SelfUpdateError):
    """Error during extraction."""

    pass


class InstallError(SelfUpdateError):
    """The executable could not be replaced."""

    pass


class ConfigError(SelfUpdateError):
    """The config file cannot be read or holds invalid options."""

    pass


class UnsupportedPlatform(SelfUpdateError):
    """The host OS or architecture has no asset naming."""

    pass
