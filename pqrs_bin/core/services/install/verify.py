"""
Archive integrity verification (SHA-256).
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from pathlib import Path

from pqrs_bin.core.services.install.errors import IntegrityError

logger = logging.getLogger(__name__)


def file_sha256(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in 8 KiB chunks."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(path: Path, expected: str) -> str:
    """Check ``path`` against the expected SHA-256 digest.

    Args:
        path: The downloaded archive.
        expected: Hex digest, optionally prefixed with ``sha256:``.

    Returns:
        The computed digest.

    Raises:
        IntegrityError: If the digests differ.
    """
    expected = expected.strip().lower().removeprefix("sha256:")
    actual = file_sha256(path)

    if not hmac.compare_digest(actual, expected):
        logger.error("SHA-256 mismatch for %s: expected %s, got %s", path.name, expected, actual)
        raise IntegrityError(
            f"SHA256 mismatch for {path.name}\n"
            f"Expected: {expected}\n"
            f"Got:      {actual}",
            expected=expected,
            actual=actual,
        )

    logger.debug("Checksum OK for %s (%s)", path.name, actual)
    return actual
