from __future__ import annotations

import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path

import requests

from ..errors import NetworkUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Downloader:
    timeout: float = 60.0
    dry_run: bool = False

    def fetch(self, url: str) -> bytes:
        logger.info("GET %s", url)
        if self.dry_run:
            return b""
        try:
            r = requests.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise NetworkUnavailable(f"Download failed: {url}: {e}") from e
        return r.content

    def stage(self, url: str, dest: Path) -> Path:
        """Download url into dest unless it is already there."""

        if dest.exists():
            logger.info("Using staged archive %s", str(dest))
            return dest
        data = self.fetch(url)
        if self.dry_run:
            logger.info("Would stage %s -> %s", url, str(dest))
            return dest
        dest.parent.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".part")
        partial.write_bytes(data)
        partial.replace(dest)
        logger.info("Staged %s (%d bytes)", str(dest), len(data))
        return dest

    def extract_tarball(self, archive: Path, dest_dir: Path) -> None:
        if self.dry_run:
            logger.info("Would extract %s -> %s", str(archive), str(dest_dir))
            return
        dest_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive, "r:*") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(dest_dir, filter="data")
            else:  # pragma: no cover
                tar.extractall(dest_dir)
        logger.info("Extracted %s -> %s", str(archive), str(dest_dir))
