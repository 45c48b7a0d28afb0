from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def read_text(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write_file(path: Path, contents: str, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if mode is not None:
        path.chmod(mode)
    logger.info("Wrote %s", str(path))


def append_text(path: Path, contents: str, *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would append to %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(contents)
