"""Replacement of an executable on disk."""

import ctypes
import logging
import os
import stat
import sys
from pathlib import Path

from selfupdate.core.errors import InstallError

logger = logging.getLogger(__name__)


def _hide_file(path: Path) -> None:
    # A running executable cannot be removed on Windows, hide it instead
    FILE_ATTRIBUTE_HIDDEN = 0x02
    if not ctypes.windll.kernel32.SetFileAttributesW(str(path), FILE_ATTRIBUTE_HIDDEN):
        logger.warning("Could not hide %s", path)


def replace_executable(target: Path, data: bytes) -> None:
    """Atomically replace ``target`` with an executable holding ``data``.

    The new file is written next to the target as ``.<name>.new`` with the
    target's permissions, the target is moved to ``.<name>.old`` and the new
    file renamed into place. The old file is removed afterwards. If the swap
    fails the old file is moved back.
    """
    target = Path(target)
    new_path = target.with_name(f".{target.name}.new")
    old_path = target.with_name(f".{target.name}.old")

    try:
        mode = stat.S_IMODE(target.stat().st_mode)
    except OSError as e:
        raise InstallError(f"Cannot access executable {target}: {e}") from e

    try:
        with open(new_path, "wb") as f:
            f.write(data)
        new_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        new_path.unlink(missing_ok=True)
        raise InstallError(f"Failed to write new executable {new_path}: {e}") from e

    # A leftover from an earlier update would block the rename on Windows
    old_path.unlink(missing_ok=True)

    try:
        os.replace(target, old_path)
    except OSError as e:
        new_path.unlink(missing_ok=True)
        raise InstallError(f"Failed to move {target} out of the way: {e}") from e

    try:
        os.replace(new_path, target)
    except OSError as e:
        new_path.unlink(missing_ok=True)
        try:
            os.replace(old_path, target)
        except OSError as rollback_error:
            raise InstallError(
                f"Failed to install {target} ({e}) and to restore it ({rollback_error})"
            ) from e
        raise InstallError(f"Failed to install {target}: {e}") from e

    try:
        old_path.unlink()
    except OSError:
        if sys.platform == "win32":
            _hide_file(old_path)
        else:
            logger.warning("Could not remove old executable %s", old_path)

    logger.info("Replaced executable %s", target)
