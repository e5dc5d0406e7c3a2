"""
Archive extraction and executable lookup.

Supports tarballs (gz/bz2/xz/plain), zip files, and raw binaries.
Members that would land outside the extraction directory are refused.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from pqrs_bin.core.services.install.errors import ArchiveError

logger = logging.getLogger(__name__)

_TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz", ".tar")
_ZIP_SUFFIXES = (".zip",)


def archive_format(name: str) -> str:
    """Classify an asset name as ``"tar"``, ``"zip"`` or ``"raw"``."""
    lower = name.lower()
    if lower.endswith(_TAR_SUFFIXES):
        return "tar"
    if lower.endswith(_ZIP_SUFFIXES):
        return "zip"
    return "raw"


def _check_member_path(name: str, dest: Path) -> None:
    pure = PurePosixPath(name)
    if pure.is_absolute() or ".." in pure.parts:
        raise ArchiveError(f"Refusing unsafe archive member: {name}")
    if not (dest / pure).resolve().is_relative_to(dest.resolve()):
        raise ArchiveError(f"Refusing unsafe archive member: {name}")


def _extract_tar(archive: Path, dest: Path) -> None:
    try:
        with tarfile.open(archive, "r:*") as tf:
            members = []
            for member in tf.getmembers():
                _check_member_path(member.name, dest)
                if member.isfile() or member.isdir():
                    members.append(member)
                else:
                    logger.debug("Skipping non-regular member %s", member.name)
            if hasattr(tarfile, "data_filter"):
                tf.extractall(dest, members=members, filter="data")
            else:
                tf.extractall(dest, members=members)
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArchiveError(f"Extract failed for {archive.name}: {e}") from e


def _extract_zip(archive: Path, dest: Path) -> None:
    try:
        with zipfile.ZipFile(archive, "r") as zf:
            for name in zf.namelist():
                _check_member_path(name, dest)
            zf.extractall(dest)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Extract failed for {archive.name}: {e}") from e


def extract_archive(archive: Path, dest: Path, *, raw_name: str = "") -> Path:
    """Unpack ``archive`` into ``dest``.

    Args:
        archive: Verified archive file.
        dest: Extraction directory (created if missing).
        raw_name: File name to give a raw (non-archive) binary.

    Returns:
        ``dest``.

    Raises:
        ArchiveError: Corrupt archive or unsafe member path.
    """
    dest.mkdir(parents=True, exist_ok=True)
    fmt = archive_format(archive.name)
    logger.debug("Extracting %s (%s) into %s", archive.name, fmt, dest)

    if fmt == "tar":
        _extract_tar(archive, dest)
    elif fmt == "zip":
        _extract_zip(archive, dest)
    else:
        shutil.copy2(archive, dest / (raw_name or archive.name))

    return dest


def find_binary(root: Path, name: str) -> Path:
    """Return the shallowest regular file called ``name`` under ``root``.

    Raises:
        ArchiveError: If no such file exists.
    """
    matches = sorted(
        (p for p in root.rglob(name) if p.is_file() and not p.is_symlink()),
        key=lambda p: (len(p.relative_to(root).parts), str(p)),
    )
    if matches:
        logger.debug("Found executable %s", matches[0])
        return matches[0]

    available = sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())
    listing = ", ".join(available[:10]) or "no files"
    raise ArchiveError(f"Executable '{name}' not found in archive (contains: {listing})")
