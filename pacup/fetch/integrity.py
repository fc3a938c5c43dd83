"""
Provides incremental checksum computation and verification of downloaded files.
"""

import logging
from pathlib import Path

from pacup.models.srcinfo import HashSum

log = logging.getLogger(__name__)

READ_CHUNK_SIZE = 131072  # 128 KB


class IncrementalHasher:
    """Feeds chunks into the digest of a declared checksum as they arrive."""

    def __init__(self, expected: HashSum):
        self.expected = expected
        self._hash = expected.algorithm.new()

    def update(self, chunk: bytes) -> None:
        self._hash.update(chunk)

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def verify(self) -> bool:
        return self.hexdigest() == self.expected.value


def verify_file(filepath: str | Path, expected: HashSum) -> bool:
    """
    Checks an existing file against a declared checksum.

    The file is read in chunks, so memory use does not depend on its size.

    Args:
        filepath: Path to the file to check.
        expected: The declared algorithm and hex digest.

    Returns:
        True if the digest matches, False if it differs or the file can't be read.
    """
    hasher = IncrementalHasher(expected)
    try:
        with open(filepath, "rb") as f:
            while chunk := f.read(READ_CHUNK_SIZE):
                hasher.update(chunk)
    except OSError as e:
        log.warning(f"Integrity check failed for '{filepath}': {e}")
        return False

    if hasher.verify():
        return True
    log.warning(
        f"Integrity check failed for '{filepath}': expected "
        f"{expected.value}, got {hasher.hexdigest()}."
    )
    return False
