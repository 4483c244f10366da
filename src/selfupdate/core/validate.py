"""Validation of downloaded assets against companion files."""

import hashlib
import re
from typing import Protocol

from selfupdate.core.errors import ValidationFailed


class Validator(Protocol):
    """Checks a downloaded asset against its validation file.

    The validation file is the asset published next to the artifact under
    the artifact's name plus :meth:`suffix`.
    """

    def suffix(self) -> str: ...

    def validate(self, asset_data: bytes, validation_data: bytes) -> None: ...


def parse_checksum_file(content: str, target_filename: str | None = None) -> str | None:
    """Parse a checksum file and find the hash for target file.

    Supports formats:
    - <hash>
    - <hash>  <filename>
    - <hash> *<filename>
    - <filename>: <hash>

    Without ``target_filename`` the first hash in the file is returned.
    """
    for line in content.strip().split("\n"):
        line = line.strip()
        if not line:
            continue

        # Format: hash, hash  filename or hash *filename
        match = re.fullmatch(r"([a-fA-F0-9]{64})(?:\s+\*?(.+))?", line)
        if match:
            hash_value, filename = match.groups()
            if target_filename is None or filename is None or filename == target_filename:
                return hash_value.lower()

        # Format: filename: hash
        match = re.fullmatch(r"(.+?):\s*([a-fA-F0-9]{64})", line)
        if match:
            filename, hash_value = match.groups()
            if target_filename is None or filename == target_filename:
                return hash_value.lower()

    return None


class SHA256Validator:
    """Validates assets against a ``.sha256`` checksum file."""

    def suffix(self) -> str:
        return ".sha256"

    def validate(self, asset_data: bytes, validation_data: bytes) -> None:
        expected = parse_checksum_file(validation_data.decode("utf-8", errors="replace"))
        if expected is None:
            raise ValidationFailed("No SHA256 checksum found in validation file")

        actual = hashlib.sha256(asset_data).hexdigest()
        if actual != expected:
            raise ValidationFailed(
                f"Checksum mismatch:\n"
                f"  Expected: {expected}\n"
                f"  Got:      {actual}"
            )
