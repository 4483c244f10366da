"""Platform detection and asset matching."""

import functools
import platform
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from selfupdate.core.errors import UnsupportedPlatform
from selfupdate.models.release import RawAsset, RawRelease


class OS(Enum):
    """Operating systems, named as they appear in asset names."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    FREEBSD = "freebsd"
    OPENBSD = "openbsd"
    NETBSD = "netbsd"


class Arch(Enum):
    """CPU architectures, named as they appear in asset names."""

    AMD64 = "amd64"
    ARM64 = "arm64"
    I386 = "386"
    ARM = "arm"
    PPC64LE = "ppc64le"
    S390X = "s390x"
    RISCV64 = "riscv64"


# Normalize what platform.machine() reports
_MACHINE_ALIASES = {
    "x86_64": Arch.AMD64,
    "amd64": Arch.AMD64,
    "arm64": Arch.ARM64,
    "aarch64": Arch.ARM64,
    "i386": Arch.I386,
    "i686": Arch.I386,
    "x86": Arch.I386,
    "armv6l": Arch.ARM,
    "armv7l": Arch.ARM,
    "ppc64le": Arch.PPC64LE,
    "s390x": Arch.S390X,
    "riscv64": Arch.RISCV64,
}

SEPARATORS = ("_", "-")
EXTENSIONS = (".zip", ".tar.gz", ".tgz", ".gzip", ".gz", ".tar.xz", ".xz", "")


@dataclass(frozen=True)
class PlatformInfo:
    """Current platform information."""

    os: OS
    arch: Arch

    @classmethod
    def detect(cls) -> "PlatformInfo":
        """Detect current platform."""
        system = platform.system().lower()
        machine = platform.machine().lower()

        try:
            os_name = OS(system)
        except ValueError:
            raise UnsupportedPlatform(f"Unsupported operating system: {system}") from None

        arch = _MACHINE_ALIASES.get(machine)
        if arch is None:
            raise UnsupportedPlatform(f"Unsupported architecture: {machine}")

        return cls(os=os_name, arch=arch)

    def __str__(self) -> str:
        return f"{self.os.value}/{self.arch.value}"


@functools.cache
def get_platform_info() -> PlatformInfo:
    """Get current platform information, detected once per process."""
    return PlatformInfo.detect()


def candidate_suffixes(platform_info: PlatformInfo) -> list[str]:
    """Asset name endings accepted on the given platform.

    On Windows every plain suffix is followed by one with ``.exe`` inserted
    before the compression extension, e.g. ``windows_amd64.exe.zip``.
    """
    os_name = platform_info.os.value
    arch = platform_info.arch.value

    suffixes = []
    for sep in SEPARATORS:
        for ext in EXTENSIONS:
            suffixes.append(f"{os_name}{sep}{arch}{ext}")
            if platform_info.os is OS.WINDOWS:
                suffixes.append(f"{os_name}{sep}{arch}.exe{ext}")
    return suffixes


def any_filter(filters: Sequence[re.Pattern]) -> Callable[[str], bool]:
    """Combine filters into one predicate true when any pattern matches.

    Patterns are tried left to right and the first match wins. With no
    filters every name passes.
    """
    if not filters:
        return lambda name: True
    return lambda name: any(f.search(name) for f in filters)


def match_asset(
    name: str,
    platform_info: PlatformInfo,
    filters: Sequence[re.Pattern] = (),
    suffixes: Sequence[str] | None = None,
) -> bool:
    """Check whether an asset name is installable on the platform."""
    if not any_filter(filters)(name):
        return False
    if suffixes is None:
        suffixes = candidate_suffixes(platform_info)
    return name.endswith(tuple(suffixes))


def find_asset(
    release: RawRelease,
    platform_info: PlatformInfo,
    filters: Sequence[re.Pattern] = (),
) -> RawAsset | None:
    """Find the asset of a release for the platform.

    When several assets match, the first one in the API's listing order is
    returned. GitHub does not document that order, so such releases are
    ambiguous.
    """
    suffixes = candidate_suffixes(platform_info)
    for asset in release.assets:
        if match_asset(asset.name, platform_info, filters, suffixes):
            return asset
    return None
