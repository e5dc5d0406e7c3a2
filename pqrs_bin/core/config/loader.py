"""
Formula loader — reads formula.yml into a Descriptor.

This is the primary entry point for loading a formula.  It reads YAML,
validates against the Pydantic model, and returns a typed, immutable
descriptor.  Writing goes through ``dump_descriptor`` so a release bump
produces a whole new file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from pqrs_bin.core.models.descriptor import Descriptor

logger = logging.getLogger(__name__)

# Default formula filename
FORMULA_FILE = "formula.yml"

# Environment overrides
ENV_CACHE_DIR = "PQRS_BIN_CACHE"
ENV_PREFIX = "PQRS_BIN_PREFIX"

DEFAULT_PREFIX = Path("/usr/local")
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "pqrs-bin" / "downloads"


class ConfigError(Exception):
    """Raised when a formula file is invalid or missing."""


def find_formula_file(start_dir: Path | None = None) -> Path | None:
    """Search for formula.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to formula.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / FORMULA_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_descriptor(path: Path) -> Descriptor:
    """Load and validate a formula file.

    The YAML may wrap the fields under a ``formula`` key or be flat.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Formula file not found: {path}")

    logger.debug("Loading formula from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    formula_data = data["formula"] if "formula" in data else data
    if not isinstance(formula_data, dict):
        raise ConfigError(f"'formula' in {path} must be a mapping")

    try:
        descriptor = Descriptor.model_validate(formula_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid formula in {path}: {e}") from e

    logger.info("Loaded formula '%s' %s", descriptor.name, descriptor.version)
    return descriptor


def resolve_descriptor(path: Path | None = None) -> Descriptor:
    """Return the descriptor to act on.

    An explicit path wins, then a formula.yml found upward from the cwd,
    then the descriptor bundled with the package.
    """
    if path is None:
        path = find_formula_file()

    if path is None:
        from pqrs_bin.core.data import builtin_descriptor

        return builtin_descriptor()

    return load_descriptor(path)


def dump_descriptor(descriptor: Descriptor, path: Path) -> None:
    """Write a descriptor as a formula file (atomic write)."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {"formula": descriptor.model_dump(mode="json")}
    content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".formula_", suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_path)
    try:
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Formula written to %s", path)


def default_prefix() -> Path:
    """Installation root used when none is given on the command line."""
    return Path(os.environ.get(ENV_PREFIX) or DEFAULT_PREFIX)


def default_cache_dir() -> Path:
    """Archive cache directory (not created here)."""
    return Path(os.environ.get(ENV_CACHE_DIR) or DEFAULT_CACHE_DIR)
