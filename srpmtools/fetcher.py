"""
SRPM fetcher - materializes a source RPM from a URL or local path.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from srpmtools.exceptions import AcquisitionError

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https")


class SRPMFetcher:
    """
    Fetches SRPMs into a local directory.

    http(s) URLs are downloaded, file:// URLs and plain paths are copied.
    Nothing is verified: no checksums, no signatures.
    """

    def __init__(self, timeout: Optional[float] = None, chunk_size: int = 8192):
        self.timeout = timeout
        self.chunk_size = chunk_size

    @staticmethod
    def is_remote(location: str) -> bool:
        return urlparse(location).scheme in REMOTE_SCHEMES

    def fetch(self, location: str, dest_dir: str) -> str:
        """
        Place the SRPM at location into dest_dir.

        Args:
            location: http(s):// URL, file:// URL or filesystem path
            dest_dir: Existing directory to store the file in

        Returns:
            Path to the local copy

        Raises:
            AcquisitionError: If the file cannot be fetched or copied
        """
        parsed = urlparse(location)

        if parsed.scheme in REMOTE_SCHEMES:
            name = os.path.basename(unquote(parsed.path))
            if not name:
                raise AcquisitionError(f"Cannot determine file name from url: {location}")
            dest = Path(dest_dir) / name
            self._download_file(location, dest)
        else:
            if parsed.scheme == "file":
                source = unquote(parsed.path)
            elif "://" in location:
                raise AcquisitionError(f"Unsupported location: {location}")
            else:
                source = location
            dest = Path(dest_dir) / os.path.basename(source)
            self._copy_file(source, dest)

        logger.info(f"Fetched {location} -> {dest}")
        return str(dest)

    def _download_file(self, url: str, dest: Path) -> None:
        """Download a file from URL."""
        logger.debug(f"Downloading {url}")
        try:
            response = requests.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()

            with open(dest, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    f.write(chunk)
        except requests.RequestException as e:
            raise AcquisitionError(f"failed to fetch url: {url}: {e}")
        except OSError as e:
            raise AcquisitionError(f"failed to save file to: {dest}: {e}")

    def _copy_file(self, source: str, dest: Path) -> None:
        if not os.path.isfile(source):
            raise AcquisitionError(f"SRPM not found: {source}")

        if os.path.abspath(source) == os.path.abspath(dest):
            return

        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise AcquisitionError(f"failed to copy {source} to {dest}: {e}")
