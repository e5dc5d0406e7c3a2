"""
Archive download.

Streams a release archive to disk.  Failures surface as
``TransportError``; retrying is left to whoever called us.
"""

from __future__ import annotations

import http.client
import logging
import socket
import urllib.error
import urllib.request
from pathlib import Path

from pqrs_bin import __version__
from pqrs_bin.core.services.install.errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = f"pqrs-bin/{__version__}"
CHUNK_SIZE = 8192


def fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def fetch_archive(url: str, dest: Path, *, timeout: int = 60) -> int:
    """Download ``url`` into ``dest``.

    Args:
        url: http(s) or file URL of the archive.
        dest: File to write.  Its parent must exist.
        timeout: Socket timeout in seconds.

    Returns:
        Number of bytes written.

    Raises:
        TransportError: On any network or stream failure.  ``dest`` is
            removed before raising.
    """
    logger.info("Fetching %s", url)
    try:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            total = int(resp.headers.get("Content-Length") or 0)
            downloaded = 0
            last_progress = -1
            with open(dest, "wb") as f:
                while True:
                    chunk = resp.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)

                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 10:
                            last_progress = pct
                            logger.info(
                                "Download progress: %d%% (%s / %s)",
                                pct, fmt_size(downloaded), fmt_size(total),
                            )
    except urllib.error.HTTPError as e:
        dest.unlink(missing_ok=True)
        raise TransportError(f"Download failed: HTTP {e.code} for {url}") from e
    except urllib.error.URLError as e:
        dest.unlink(missing_ok=True)
        raise TransportError(f"Download failed: {e.reason} ({url})") from e
    except (socket.timeout, TimeoutError) as e:
        dest.unlink(missing_ok=True)
        raise TransportError(f"Download timed out after {timeout}s ({url})") from e
    except (OSError, http.client.HTTPException, ValueError) as e:
        # ValueError: malformed URL or Content-Length
        dest.unlink(missing_ok=True)
        raise TransportError(f"Download failed: {e!r} ({url})") from e

    if total and downloaded != total:
        dest.unlink(missing_ok=True)
        raise TransportError(
            f"Download truncated: got {fmt_size(downloaded)} of {fmt_size(total)} ({url})"
        )

    logger.info("Downloaded %s from %s", fmt_size(downloaded), url)
    return downloaded
