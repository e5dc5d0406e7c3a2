"""
Install errors.

Two failure kinds matter to a user: the archive could not be fetched
(``TransportError``) or it is not the archive the formula describes
(``IntegrityError``).  ``ArchiveError`` covers a verified archive that
cannot be unpacked or lacks the executable.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base class for install failures."""

    kind = "install"


class TransportError(InstallError):
    """The archive could not be fetched.  Never retried here."""

    kind = "transport"


class IntegrityError(InstallError):
    """The archive digest does not match the formula."""

    kind = "integrity"

    def __init__(self, message: str, *, expected: str, actual: str) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ArchiveError(InstallError):
    """The archive is corrupt, unsafe, or lacks the executable."""

    kind = "archive"
