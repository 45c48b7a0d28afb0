from __future__ import annotations

import logging
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

OS_RASPBIAN = "raspbian"
OS_DEBIAN = "debian"

SUPPORTED_ARCHES: Dict[str, frozenset] = {
    OS_RASPBIAN: frozenset({"armhf", "arm64"}),
    OS_DEBIAN: frozenset({"amd64", "arm64", "armhf"}),
}


@dataclass(frozen=True)
class HostFacts:
    os_id: str
    arch: str
    free_bytes: int


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv7l": "armhf",
        "armv6l": "armhf",
    }.get(m, m)


def parse_os_release(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        out[key.strip()] = value.strip().strip('"').strip("'")
    return out


def detect_os(root: str = "/") -> Optional[str]:
    """Return 'raspbian', 'debian' or the raw ID of anything else.

    Raspberry Pi OS 64-bit reports ID=debian; the rpi-issue file is the
    signal that tells it apart from stock Debian.
    """

    base = Path(root)
    release = None
    for rel in ("etc/os-release", "usr/lib/os-release"):
        p = base / rel
        if p.exists():
            release = parse_os_release(p.read_text(encoding="utf-8", errors="ignore"))
            break
    if release is None:
        return None

    os_id = release.get("ID", "").lower()
    if os_id == OS_RASPBIAN or (os_id == OS_DEBIAN and (base / "etc/rpi-issue").exists()):
        return OS_RASPBIAN
    return os_id or None


def free_root_bytes(root: str = "/") -> int:
    return shutil.disk_usage(root).free


def probe_host(root: str = "/") -> HostFacts:
    facts = HostFacts(
        os_id=detect_os(root) or "unknown",
        arch=normalize_arch(platform.machine()),
        free_bytes=free_root_bytes(root),
    )
    logger.info("Host: os=%s arch=%s free_bytes=%s", facts.os_id, facts.arch, facts.free_bytes)
    return facts
