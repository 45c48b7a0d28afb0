from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = 1


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) == "yaml":
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        text = yaml.safe_dump(state, sort_keys=False)
    else:
        text = json.dumps(state, indent=2, sort_keys=True) + "\n"

    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys (without overriding stored values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("config", {})
    exe = state.setdefault("execution", {})
    exe.setdefault("applied_steps", [])
    return state


def mark_step_applied(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    applied = exe.setdefault("applied_steps", [])
    if step_id not in applied:
        applied.append(step_id)


def is_step_applied(state: Dict[str, Any], step_id: str) -> bool:
    return step_id in applied_steps(state)


def applied_steps(state: Dict[str, Any]) -> List[str]:
    exe = state.get("execution") or {}
    return list(exe.get("applied_steps") or [])
