"""Extraction of the executable from a downloaded asset."""

import gzip
import io
import logging
import lzma
import tarfile
import zipfile
from pathlib import PurePosixPath

from selfupdate.core.errors import ExtractionError
from selfupdate.core.platform import OS

logger = logging.getLogger(__name__)


def is_executable_name(cmd: str, name: str, os_name: OS) -> bool:
    """Check if an archive member name is the command's executable."""
    if name == cmd:
        return True
    return os_name is OS.WINDOWS and name == f"{cmd}.exe"


def _basename(member_name: str) -> str:
    # zip and tar members both use forward slashes
    return PurePosixPath(member_name).name


def _extract_from_zip(data: bytes, cmd: str, os_name: OS) -> bytes:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        for info in zf.infolist():
            if info.is_dir():
                continue
            if is_executable_name(cmd, _basename(info.filename), os_name):
                logger.debug("Found executable %s in zip archive", info.filename)
                return zf.read(info)
    raise ExtractionError(f"File {cmd!r} for the command is not found in zip archive")


def _extract_from_tar(data: bytes, mode: str, cmd: str, os_name: OS) -> bytes:
    with tarfile.open(fileobj=io.BytesIO(data), mode=mode) as tar:
        for member in tar:
            if not member.isfile():
                continue
            if is_executable_name(cmd, _basename(member.name), os_name):
                logger.debug("Found executable %s in tar archive", member.name)
                f = tar.extractfile(member)
                return f.read()
    raise ExtractionError(f"File {cmd!r} for the command is not found in tar archive")


def decompress_command(data: bytes, asset_name: str, cmd: str, os_name: OS) -> bytes:
    """Return the executable contained in a downloaded asset.

    Archives (.zip, .tar.gz, .tgz, .tar.xz) are searched for a file named
    ``cmd`` (or ``cmd.exe`` on Windows) at any depth. Compressed single files
    (.gzip, .gz, .xz) are decompressed. Anything else is taken as the
    executable itself.
    """
    name = asset_name.lower()

    try:
        if name.endswith(".zip"):
            return _extract_from_zip(data, cmd, os_name)

        elif name.endswith(".tar.gz") or name.endswith(".tgz"):
            return _extract_from_tar(data, "r:gz", cmd, os_name)

        elif name.endswith(".tar.xz"):
            return _extract_from_tar(data, "r:xz", cmd, os_name)

        elif name.endswith(".gzip") or name.endswith(".gz"):
            return gzip.decompress(data)

        elif name.endswith(".xz"):
            return lzma.decompress(data)

    except (tarfile.TarError, zipfile.BadZipFile, gzip.BadGzipFile, lzma.LZMAError, EOFError, OSError) as e:
        raise ExtractionError(f"Failed to decompress {asset_name}: {e}") from e

    # Assume raw binary
    return data
