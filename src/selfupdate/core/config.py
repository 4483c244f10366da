"""Configuration of the updater and discovery of ambient settings."""

import logging
import os
import subprocess
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from selfupdate.core.errors import ConfigError
from selfupdate.core.validate import Validator

logger = logging.getLogger(__name__)


def config_path() -> Path:
    """Path of the YAML config file, overridable with SELFUPDATE_CONFIG."""
    return Path(os.environ.get("SELFUPDATE_CONFIG", Path.home() / ".selfupdate.yaml"))


def load_config_file(path: Path | None = None) -> dict:
    """Load the YAML config file, or an empty dict when there is none."""
    path = path or config_path()
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _filters_option(value) -> tuple[str, ...]:
    # A single pattern may be written without list syntax
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigError(f"Option 'filters' must be a string or a list of strings, got {value!r}")


def _timeout_option(value) -> float:
    if value is None:
        return 30.0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"Option 'timeout' must be a positive number, got {value!r}")
    return float(value)


def git_config_token() -> str:
    """Read ``github.token`` from the user's git configuration."""
    try:
        result = subprocess.run(
            ["git", "config", "--global", "--get", "github.token"],
            capture_output=True,
            text=True,
        )
    except OSError:
        # git is not installed
        return ""
    return result.stdout.strip() if result.returncode == 0 else ""


@dataclass(frozen=True)
class Config:
    """Configuration for an Updater.

    ``filters`` are regular expressions; when any is given an asset must match
    at least one of them in addition to the platform suffix rules.
    ``enterprise_base_url`` and ``enterprise_upload_url`` point the client at
    a GitHub Enterprise server instead of github.com.
    """

    api_token: str = ""
    enterprise_base_url: str = ""
    enterprise_upload_url: str = ""
    filters: tuple[str, ...] = field(default_factory=tuple)
    validator: Validator | None = None
    timeout: float = 30.0

    @classmethod
    def from_environment(cls, path: Path | None = None) -> "Config":
        """Create config from the environment and the user's config files.

        The API token comes from $GITHUB_TOKEN, then the ``token`` key of the
        YAML config file, then ``git config github.token``.
        """
        data = load_config_file(path)

        token = os.environ.get("GITHUB_TOKEN") or data.get("token") or git_config_token()
        if not token:
            logger.debug("No GitHub token found, API requests are unauthenticated")

        return cls(
            api_token=token,
            enterprise_base_url=data.get("enterprise_base_url") or "",
            enterprise_upload_url=data.get("enterprise_upload_url") or "",
            filters=_filters_option(data.get("filters")),
            timeout=_timeout_option(data.get("timeout")),
        )

    def with_options(self, **changes) -> "Config":
        """Return a copy with some options changed."""
        if "filters" in changes:
            changes["filters"] = tuple(changes["filters"])
        return replace(self, **changes)
