"""
Bundled formula data.

The built-in descriptor ships as ``pqrs.yml`` next to this module and is
loaded once per process:

    from pqrs_bin.core.data import builtin_descriptor

    descriptor = builtin_descriptor()
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pqrs_bin.core.models.descriptor import Descriptor

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent

BUILTIN_FORMULA_FILE = _DATA_DIR / "pqrs.yml"


@lru_cache(maxsize=1)
def builtin_descriptor() -> Descriptor:
    """Return the descriptor bundled with the package."""
    from pqrs_bin.core.config.loader import load_descriptor

    logger.debug("Loading built-in formula from %s", BUILTIN_FORMULA_FILE)
    return load_descriptor(BUILTIN_FORMULA_FILE)
