from __future__ import annotations

import argparse
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Sequence, Tuple

from .errors import InvalidArgument, UnsupportedPlatform
from .lib.env import DEFAULT_LOG_PATH, DEFAULT_STATE_PATH
from .lib.hostinfo import OS_DEBIAN, OS_RASPBIAN, SUPPORTED_ARCHES, HostFacts
from .templates import AUTOSTART_CRON, AUTOSTART_SYSTEMD

logger = logging.getLogger(__name__)

# ~75% of free space expressed in GiB: 1 GiB of quota per 1.32 GB free.
BYTES_PER_QUOTA_GIB = 1_320_000_000

DEFAULT_USER = "ipfs"
DEFAULT_NODE_VERSION = "latest"
DEFAULT_OPEN_FILES = 8192
DEFAULT_DAEMON_FLAGS = ("--enable-gc",)

_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")
_USER_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")

Autostart = Literal["systemd", "cron"]


@dataclass(frozen=True)
class ProvisioningConfig:
    autostart: Autostart
    distro_upgrade: bool
    install_firewall: bool
    runtime_version: Optional[str]
    storage_quota_gib: int
    quota_auto: bool
    pause_after_step: bool
    detected_os: str
    detected_arch: str
    node_version: str = DEFAULT_NODE_VERSION
    service_user: str = DEFAULT_USER
    init_profile: str = "server"
    open_files_limit: int = DEFAULT_OPEN_FILES
    daemon_flags: Tuple[str, ...] = DEFAULT_DAEMON_FLAGS
    root: str = "/"
    dry_run: bool = False


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise InvalidArgument(message)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="ipfs-installer",
        description="Install and configure an IPFS node on Raspberry Pi OS or Debian.",
    )
    p.add_argument("-a", dest="autostart_cron", action="store_true", help="Start the daemon from an @reboot cron job instead of systemd")
    p.add_argument("-d", dest="distro_upgrade", action="store_true", help="Run a full distribution upgrade first")
    p.add_argument("-f", dest="force_firewall", action="store_true", help="Install and configure ufw even on Raspberry Pi OS")
    p.add_argument("-g", dest="runtime_version", metavar="VERSION", default=None, help="Install this Go version (default: the distro golang package)")
    p.add_argument("-m", dest="quota", metavar="GB", default=None, help="Storage quota in GB (default: ~75%% of free space)")
    p.add_argument("-w", dest="wait", action="store_true", help="Pause after every step")
    p.add_argument("--node-version", default=None, help="kubo version to build (default: latest)")
    p.add_argument("--user", default=None, help="Service account running the daemon (default: ipfs)")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--root", default="/", help="Filesystem root to provision")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    return p


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def parse_quota(value: Any) -> int:
    """Validate an explicit quota: a positive whole number of gigabytes."""

    text = str(value).strip()
    if text.upper().endswith("G"):
        text = text[:-1]
    if not (text.isascii() and text.isdigit()):
        raise InvalidArgument(f"Storage quota must be a positive integer (GB), got {value!r}")
    gib = int(text)
    if gib <= 0:
        raise InvalidArgument(f"Storage quota must be a positive integer (GB), got {value!r}")
    return gib


def auto_quota(free_bytes: int) -> int:
    return max(free_bytes, 0) // BYTES_PER_QUOTA_GIB


def check_platform(facts: HostFacts) -> None:
    arches = SUPPORTED_ARCHES.get(facts.os_id)
    if arches is None:
        raise UnsupportedPlatform(f"Unsupported OS {facts.os_id!r}; need Raspberry Pi OS or Debian")
    if facts.arch not in arches:
        raise UnsupportedPlatform(f"Unsupported architecture {facts.arch!r} on {facts.os_id}")


def _runtime_version(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    v = str(value).strip()
    if v.startswith("go"):
        v = v[2:]
    if not _VERSION_RE.match(v):
        raise InvalidArgument(f"Go version must look like 1.22.5, got {value!r}")
    return v


def _resolve_quota(args: argparse.Namespace, stored: Mapping[str, Any], facts: HostFacts) -> Tuple[int, bool]:
    if args.quota is not None:
        return parse_quota(args.quota), False

    # Only a quota an earlier run computed itself is reused.
    if stored.get("quota_auto") and stored.get("storage_quota_gib") is not None:
        value = stored["storage_quota_gib"]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgument(f"Stored storage_quota_gib must be a whole number, got {value!r}")
        return value, True

    return auto_quota(facts.free_bytes), True


def resolve_config(
    args: argparse.Namespace,
    facts: HostFacts,
    stored: Optional[Mapping[str, Any]] = None,
) -> ProvisioningConfig:
    """Combine flags and host facts into one immutable config.

    Options left off the command line take their built-in or platform
    default. The stored config (the state file's config section) only
    contributes a previously auto-computed quota. Nothing here touches the
    filesystem.
    """

    quota, quota_auto = _resolve_quota(args, stored or {}, facts)
    runtime_version = _runtime_version(args.runtime_version)

    user = args.user or DEFAULT_USER
    if not _USER_RE.match(str(user)):
        raise InvalidArgument(f"Invalid service account name {user!r}")

    check_platform(facts)

    cfg = ProvisioningConfig(
        autostart=AUTOSTART_CRON if args.autostart_cron else AUTOSTART_SYSTEMD,
        distro_upgrade=bool(args.distro_upgrade),
        install_firewall=bool(args.force_firewall or facts.os_id == OS_DEBIAN),
        runtime_version=runtime_version,
        storage_quota_gib=quota,
        quota_auto=quota_auto,
        pause_after_step=bool(args.wait),
        detected_os=facts.os_id,
        detected_arch=facts.arch,
        node_version=str(args.node_version or DEFAULT_NODE_VERSION),
        service_user=str(user),
        init_profile="lowpower" if facts.os_id == OS_RASPBIAN else "server",
        root=args.root,
        dry_run=bool(args.dry_run),
    )
    return cfg


def persistable(cfg: ProvisioningConfig) -> dict:
    """Record of the resolved config kept in the state file.

    Only storage_quota_gib (when quota_auto) is read back by a later run.
    """

    return {
        "autostart": cfg.autostart,
        "distro_upgrade": cfg.distro_upgrade,
        "install_firewall": cfg.install_firewall,
        "runtime_version": cfg.runtime_version,
        "storage_quota_gib": cfg.storage_quota_gib,
        "quota_auto": cfg.quota_auto,
        "node_version": cfg.node_version,
        "service_user": cfg.service_user,
    }
