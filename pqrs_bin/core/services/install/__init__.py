"""
Install engine — fetch, verify, extract, place.

Each step lives in its own module and raises an ``InstallError``
subclass on failure; ``pqrs_bin.core.use_cases.install`` sequences them.
"""

from pqrs_bin.core.services.install.cache import ArchiveCache  # noqa: F401
from pqrs_bin.core.services.install.errors import (  # noqa: F401
    ArchiveError,
    InstallError,
    IntegrityError,
    TransportError,
)
from pqrs_bin.core.services.install.extract import (  # noqa: F401
    archive_format,
    extract_archive,
    find_binary,
)
from pqrs_bin.core.services.install.fetch import fetch_archive, fmt_size  # noqa: F401
from pqrs_bin.core.services.install.place import place_binary  # noqa: F401
from pqrs_bin.core.services.install.verify import file_sha256, verify_checksum  # noqa: F401
