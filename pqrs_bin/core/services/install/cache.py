"""
Verified-archive cache.

Archives that passed checksum verification are kept under
``<cache>/<sha256>/<archive_name>`` so a reinstall of the same release
needs no network.  Entries are re-verified on every lookup; a stale or
corrupt entry is dropped.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pqrs_bin.core.models.descriptor import Descriptor
from pqrs_bin.core.services.install.errors import IntegrityError
from pqrs_bin.core.services.install.verify import verify_checksum

logger = logging.getLogger(__name__)


class ArchiveCache:
    """Content-addressed store of verified release archives."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def entry_path(self, descriptor: Descriptor) -> Path:
        return self.root / descriptor.sha256 / descriptor.archive_name

    def lookup(self, descriptor: Descriptor) -> Path | None:
        """Return the cached archive for ``descriptor`` if it still verifies."""
        path = self.entry_path(descriptor)
        if not path.is_file():
            return None

        try:
            verify_checksum(path, descriptor.sha256)
        except IntegrityError:
            logger.warning("Dropping corrupt cache entry %s", path)
            shutil.rmtree(path.parent, ignore_errors=True)
            return None

        logger.info("Using cached archive %s", path)
        return path

    def store(self, descriptor: Descriptor, archive: Path) -> Path:
        """Copy a verified archive into the cache."""
        path = self.entry_path(descriptor)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f".{path.name}.tmp")
        shutil.copyfile(archive, tmp)
        tmp.replace(path)
        logger.debug("Cached %s", path)
        return path

    def entries(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.iterdir() if p.is_dir())

    def clear(self) -> int:
        """Remove every cached archive.  Returns the number of entries removed."""
        count = len(self.entries())
        if self.root.exists():
            shutil.rmtree(self.root)
        logger.info("Cleared %d cached archive(s) from %s", count, self.root)
        return count
