"""
Install use cases — install, verify, and bump a formula.

These functions sequence the install engine and never raise for an
expected failure: every outcome is reported through a result object the
CLI can render or dump as JSON.

Ordering guarantees for ``install_formula``:

    obtain archive → verify checksum → extract → locate binary → place

Nothing is written under the install prefix until the last step, so a
transport, integrity, or archive failure leaves the prefix untouched.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from pqrs_bin.core.config.loader import default_cache_dir
from pqrs_bin.core.models.descriptor import Descriptor
from pqrs_bin.core.services.install import (
    ArchiveCache,
    InstallError,
    IntegrityError,
    TransportError,
    extract_archive,
    fetch_archive,
    file_sha256,
    find_binary,
    place_binary,
    verify_checksum,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass
class InstallResult:
    """Outcome of an install or verify run."""

    descriptor: Descriptor
    ok: bool = False
    prefix: Path | None = None
    path: Path | None = None
    sha256: str = ""
    size_bytes: int = 0
    cached: bool = False
    error: str | None = None
    error_kind: str | None = None

    def fail(self, error: str, kind: str) -> "InstallResult":
        self.ok = False
        self.error = error
        self.error_kind = kind
        return self

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "name": self.descriptor.name,
            "version": self.descriptor.version,
            "prefix": str(self.prefix) if self.prefix else None,
            "path": str(self.path) if self.path else None,
            "sha256": self.sha256 or None,
            "size_bytes": self.size_bytes,
            "cached": self.cached,
            "error": self.error,
            "error_kind": self.error_kind,
        }


@dataclass
class BumpResult:
    """Outcome of deriving a descriptor for a new release."""

    previous: Descriptor
    descriptor: Descriptor | None = None
    size_bytes: int = 0
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.descriptor is not None and self.error is None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "previous": self.previous.to_dict(),
            "formula": self.descriptor.to_dict() if self.descriptor else None,
            "size_bytes": self.size_bytes,
            "error": self.error,
            "error_kind": self.error_kind,
        }


def _obtain_archive(
    url: str,
    archive_name: str,
    workdir: Path,
    *,
    archive: Path | None,
    timeout: int,
) -> Path:
    """Return a local path to the archive: the given file, or a fresh download."""
    if archive is not None:
        if not archive.is_file():
            raise TransportError(f"Archive not found: {archive}")
        logger.info("Using local archive %s", archive)
        return archive

    dest = workdir / (archive_name or "archive")
    fetch_archive(url, dest, timeout=timeout)
    return dest


def install_formula(
    descriptor: Descriptor,
    prefix: Path,
    *,
    archive: Path | None = None,
    use_cache: bool = True,
    cache_dir: Path | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> InstallResult:
    """Fetch, verify, extract, and place the formula's executable.

    Args:
        descriptor: The formula to install.
        prefix: Installation root; the executable lands in ``<prefix>/bin``.
        archive: Local archive to use instead of downloading.
        use_cache: Look up and store verified archives in the cache.
        cache_dir: Override the cache directory.
        timeout: Download timeout in seconds.

    Returns:
        InstallResult.  On failure ``error_kind`` is one of
        ``transport``, ``integrity``, ``archive`` or ``filesystem``.
    """
    prefix = Path(prefix)
    result = InstallResult(descriptor=descriptor, prefix=prefix)
    cache = ArchiveCache(cache_dir or default_cache_dir()) if use_cache else None
    target = descriptor.target_path(prefix)

    logger.info("Installing %s %s into %s", descriptor.name, descriptor.version, prefix)

    with tempfile.TemporaryDirectory(prefix="pqrs_bin_") as tmp:
        workdir = Path(tmp)
        try:
            source = None
            if cache is not None and archive is None:
                source = cache.lookup(descriptor)
                result.cached = source is not None
            if source is None:
                source = _obtain_archive(
                    descriptor.url,
                    descriptor.archive_name,
                    workdir,
                    archive=archive,
                    timeout=timeout,
                )

            result.sha256 = verify_checksum(source, descriptor.sha256)
            result.size_bytes = source.stat().st_size

            extracted = extract_archive(
                source, workdir / "extracted", raw_name=descriptor.binary,
            )
            binary = find_binary(extracted, descriptor.binary)
        except InstallError as e:
            logger.error("Install of %s failed: %s", descriptor.name, e)
            return result.fail(str(e), e.kind)

        try:
            result.path = place_binary(binary, target)
        except OSError as e:
            logger.error("Cannot write %s: %s", target, e)
            return result.fail(f"Cannot write {target}: {e}", "filesystem")

        if cache is not None and not result.cached:
            try:
                cache.store(descriptor, source)
            except OSError as e:
                logger.warning("Could not cache %s: %s", descriptor.archive_name, e)

    result.ok = True
    return result


def verify_formula(
    descriptor: Descriptor,
    *,
    archive: Path | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> InstallResult:
    """Fetch (or read) the archive and check it against the formula's digest."""
    result = InstallResult(descriptor=descriptor)

    with tempfile.TemporaryDirectory(prefix="pqrs_bin_") as tmp:
        try:
            source = _obtain_archive(
                descriptor.url,
                descriptor.archive_name,
                Path(tmp),
                archive=archive,
                timeout=timeout,
            )
            result.size_bytes = source.stat().st_size
            result.sha256 = verify_checksum(source, descriptor.sha256)
        except InstallError as e:
            if isinstance(e, IntegrityError):
                result.sha256 = e.actual
            return result.fail(str(e), e.kind)

    result.ok = True
    return result


def bump_formula(
    descriptor: Descriptor,
    *,
    version: str,
    url: str | None = None,
    archive: Path | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> BumpResult:
    """Derive the descriptor for a new release.

    The archive at ``url`` (or the local ``archive``) is hashed and a new
    descriptor is built with the new version, URL, and digest.  The
    given descriptor is left as it was.
    """
    result = BumpResult(previous=descriptor)

    data = descriptor.model_dump()
    data.update(version=version, url=url or descriptor.url)
    try:
        # validated before any download; the digest is filled in below
        candidate = Descriptor.model_validate(data)
    except ValidationError as e:
        result.error = f"Invalid formula: {e}"
        result.error_kind = "config"
        return result

    with tempfile.TemporaryDirectory(prefix="pqrs_bin_") as tmp:
        try:
            source = _obtain_archive(
                candidate.url,
                candidate.archive_name,
                Path(tmp),
                archive=archive,
                timeout=timeout,
            )
            digest = file_sha256(source)
            result.size_bytes = source.stat().st_size
        except InstallError as e:
            result.error = str(e)
            result.error_kind = e.kind
            return result

    result.descriptor = Descriptor.model_validate({**candidate.model_dump(), "sha256": digest})

    logger.info(
        "Bumped %s %s → %s (%s)",
        descriptor.name, descriptor.version, result.descriptor.version, digest,
    )
    return result


def clear_cache(cache_dir: Path | None = None) -> int:
    """Remove all cached archives."""
    return ArchiveCache(cache_dir or default_cache_dir()).clear()


__all__ = [
    "BumpResult",
    "InstallResult",
    "bump_formula",
    "clear_cache",
    "install_formula",
    "verify_formula",
]
