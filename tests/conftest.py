"""
Shared test fixtures and configuration.
"""

import hashlib
import io
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

import pytest

from pqrs_bin.core.models.descriptor import Descriptor

PQRS_BYTES = b"#!/bin/sh\necho 'pqrs 0.1.1'\n"


def make_tarball(path: Path, members: dict[str, bytes]) -> Path:
    """Write a gzipped tarball with the given member names and contents."""
    with tarfile.open(path, "w:gz") as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return path


def make_zip(path: Path, members: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


def sha256_of(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def descriptor_for(archive: Path, **overrides) -> Descriptor:
    """A descriptor whose URL and digest point at a local archive."""
    data = {
        "name": "pqrs",
        "description": "Apache Parquet command-line tools and utilities",
        "homepage": "https://github.com/manojkarthick/pqrs",
        "url": archive.as_uri(),
        "sha256": sha256_of(archive),
        "version": "0.1.1",
    }
    data.update(overrides)
    return Descriptor.model_validate(data)


@dataclass
class Release:
    archive: Path
    descriptor: Descriptor


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the archive cache, prefix, and cwd inside the test's tmp dir."""
    monkeypatch.setenv("PQRS_BIN_CACHE", str(tmp_path / "cache"))
    monkeypatch.setenv("PQRS_BIN_PREFIX", str(tmp_path / "default-prefix"))
    monkeypatch.delenv("PQRS_BIN_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PQRS_BIN_LOG_FILE", raising=False)
    monkeypatch.delenv("PQRS_BIN_LOG_FILE_LEVEL", raising=False)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def prefix(tmp_path: Path) -> Path:
    return tmp_path / "prefix"


@pytest.fixture
def release(tmp_path: Path) -> Release:
    """A pqrs release tarball served from a file:// URL."""
    dist = tmp_path / "dist"
    dist.mkdir()
    archive = make_tarball(dist / "pqrs-mac.tar.gz", {"pqrs": PQRS_BYTES})
    return Release(archive=archive, descriptor=descriptor_for(archive))
