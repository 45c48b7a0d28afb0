from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .files import write_file

logger = logging.getLogger(__name__)

QUOTA_SECTION = "Datastore"
QUOTA_KEY = "StorageMax"


def quota_value(gib: int) -> str:
    return f"{gib}G"


def _detect_indent(text: str) -> Union[int, str, None]:
    for line in text.splitlines()[1:]:
        stripped = line.lstrip(" \t")
        if stripped and len(stripped) != len(line):
            ws = line[: len(line) - len(stripped)]
            return ws if "\t" in ws else len(ws)
    return None


def _dump(data: Dict[str, Any], indent: Union[int, str, None], trailing_newline: bool) -> str:
    out = json.dumps(data, indent=indent, ensure_ascii=False)
    return out + "\n" if trailing_newline else out


def _load(text: str) -> Dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Node config must be a JSON object, got {type(data)}")
    section = data.get(QUOTA_SECTION)
    if not isinstance(section, dict):
        raise ValueError(f"Node config has no {QUOTA_SECTION} object")
    return data


def read_storage_max(text: str) -> Optional[str]:
    value = _load(text)[QUOTA_SECTION].get(QUOTA_KEY)
    return None if value is None else str(value)


def set_storage_max(text: str, value: str) -> str:
    """Return text with Datastore.StorageMax set to value.

    The document is parsed and re-serialized with its own indentation, so
    every other key comes back byte-identical as long as the file was written
    by a standard JSON encoder (which is how ipfs writes it).
    """

    data = _load(text)
    indent = _detect_indent(text)
    trailing_newline = text.endswith("\n")

    if _dump(data, indent, trailing_newline) != text:
        logger.warning("Node config formatting is not canonical JSON; it will be normalized")

    data[QUOTA_SECTION][QUOTA_KEY] = value
    return _dump(data, indent, trailing_newline)


def apply_storage_quota(path: Path, gib: int, *, dry_run: bool = False) -> bool:
    """Rewrite the quota in place; return False when it was already set."""

    text = path.read_text(encoding="utf-8")
    want = quota_value(gib)
    if read_storage_max(text) == want:
        return False
    write_file(path, set_storage_max(text, want), dry_run=dry_run)
    logger.info("Set %s.%s=%s in %s", QUOTA_SECTION, QUOTA_KEY, want, str(path))
    return True
