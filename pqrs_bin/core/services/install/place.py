"""
Binary placement — atomic copy into the install root.

The executable is written to a temp file beside the target, made
executable, then renamed over the target, so the target path holds
either the old file or the complete new one.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


def place_binary(source: Path, target: Path) -> Path:
    """Install ``source`` at ``target`` with executable permissions.

    Returns:
        ``target``.

    Raises:
        OSError: If the target directory cannot be created or written.
    """
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}_", suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_path)
    try:
        shutil.copyfile(source, tmp)
        os.chmod(tmp, EXECUTABLE_MODE)
        tmp.replace(target)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.info("Installed %s", target)
    return target
