"""
Release archive downloads.

Fetches Node.js archives from the official dist server or a network share.
Failures are not retried; the caller surfaces them to the operator.
"""

from __future__ import annotations

import http.client
import logging
import os
import shutil
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path

from .environment import DEFAULT_DIST_URL
from .versions import Version

logger = logging.getLogger(__name__)

USER_AGENT = "nvm-upgrade/1.0"
CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """Base exception for download failures."""
    pass


class NotFound(DownloadError):
    """Raised when the server reports the file does not exist (HTTP 404)."""
    pass


class TransferFailed(DownloadError):
    """Raised for any other transport failure."""
    pass


def node_archive_name(version: Version, arch: str = "x64", os_label: str = "linux") -> str:
    """Official archive name, e.g. node-v22.9.0-linux-x64.tar.xz."""
    return f"node-{version}-{os_label}-{arch}.tar.xz"


def node_dist_url(
    version: Version,
    arch: str = "x64",
    base_url: str = DEFAULT_DIST_URL,
    os_label: str = "linux",
) -> str:
    """Download URL of the official archive for a version."""
    return f"{base_url.rstrip('/')}/{version}/{node_archive_name(version, arch, os_label)}"


class Downloader:
    """
    Streams a URL to a local file.

    Args:
        timeout: Socket timeout in seconds
    """

    def __init__(self, timeout: float = 30):
        self.timeout = timeout

    def fetch(self, url: str, dest_dir: str | os.PathLike) -> Path:
        """
        Download a URL into a directory.

        Args:
            url: File URL
            dest_dir: Directory that receives the file

        Returns:
            Path of the downloaded file

        Raises:
            NotFound: If the server answers 404
            TransferFailed: On any other error
        """
        file_name = os.path.basename(urllib.parse.urlparse(url).path) or "node-download"
        destination = Path(dest_dir) / file_name
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Downloading {url}...")
        try:
            req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                with open(destination, "wb") as f:
                    shutil.copyfileobj(response, f, CHUNK_SIZE)
        except urllib.error.HTTPError as e:
            destination.unlink(missing_ok=True)
            if e.code == 404:
                raise NotFound(f"{url} does not exist on the server.") from e
            raise TransferFailed(f"Failed to download {url}: HTTP {e.code} {e.reason}") from e
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            destination.unlink(missing_ok=True)
            raise TransferFailed(f"Failed to download {url}: {e}") from e

        logger.info(f"Download complete: {destination}")
        return destination
