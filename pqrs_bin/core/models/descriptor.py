"""
Descriptor model — the formula for one prebuilt binary release.

A descriptor is authored once per release and never mutated: a new
version is a new descriptor.  It carries only data; the install engine
in ``pqrs_bin.core.services.install`` honours its contract.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")

# MAJOR.MINOR.PATCH with optional -prerelease and +build
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)


class Descriptor(BaseModel):
    """Declarative record describing how to obtain and place a binary.

    ``binary`` names the executable inside the archive and defaults to
    ``name``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    description: str = ""
    homepage: str = ""
    url: str
    sha256: str
    version: str
    binary: str = ""

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v:
            raise ValueError(f"invalid package name: {v!r}")
        return v

    @field_validator("sha256")
    @classmethod
    def _check_sha256(cls, v: str) -> str:
        digest = v.strip().lower().removeprefix("sha256:")
        if not _SHA256_RE.match(digest):
            raise ValueError("sha256 must be 64 hexadecimal characters")
        return digest

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: str) -> str:
        version = v.strip().removeprefix("v")
        if not _SEMVER_RE.match(version):
            raise ValueError(f"not a semantic version: {v!r}")
        return version

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        if any(c.isspace() or ord(c) < 0x20 or ord(c) == 0x7F for c in v):
            raise ValueError(f"download URL contains whitespace or control characters: {v!r}")
        parsed = urlparse(v)
        # file:// is allowed for local mirrors
        if parsed.scheme not in ("http", "https", "file") or not parsed.path:
            raise ValueError(f"unsupported download URL: {v!r}")
        return v

    @field_validator("homepage")
    @classmethod
    def _check_homepage(cls, v: str) -> str:
        if v and urlparse(v).scheme not in ("http", "https"):
            raise ValueError(f"homepage must be an http(s) URL: {v!r}")
        return v

    @model_validator(mode="before")
    @classmethod
    def _default_binary(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("binary"):
            data = {**data, "binary": data.get("name", "")}
        return data

    @field_validator("binary")
    @classmethod
    def _check_binary(cls, v: str) -> str:
        v = v.strip()
        if "/" in v or v in ("", ".", ".."):
            raise ValueError(f"binary must be a bare file name: {v!r}")
        return v

    @property
    def archive_name(self) -> str:
        """File name of the release archive (last URL path component)."""
        return PurePosixPath(urlparse(self.url).path).name

    def bin_dir(self, prefix: Path) -> Path:
        """Directory the executable is installed into."""
        return Path(prefix) / "bin"

    def target_path(self, prefix: Path) -> Path:
        """Full path of the installed executable."""
        return self.bin_dir(prefix) / self.binary

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
