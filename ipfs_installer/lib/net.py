from __future__ import annotations

import logging
import sys
from typing import Callable

import requests

from ..errors import NetworkUnavailable
from .command import run_cmd
from .hostinfo import OS_RASPBIAN

logger = logging.getLogger(__name__)

PROBE_URL = "https://dist.ipfs.tech"


def is_online(url: str = PROBE_URL, *, timeout: float = 10.0) -> bool:
    """Best-effort reachability check of the download origin."""

    try:
        requests.head(url, timeout=timeout, allow_redirects=True)
        return True
    except requests.RequestException as e:
        logger.warning("Connectivity probe to %s failed: %s", url, e)
        return False


def ensure_online(
    os_id: str,
    *,
    url: str = PROBE_URL,
    probe: Callable[[str], bool] = is_online,
    interactive: bool | None = None,
    dry_run: bool = False,
) -> None:
    """Abort with NetworkUnavailable unless the origin is reachable.

    On Raspberry Pi OS with a terminal attached, raspi-config is opened once
    so the operator can set up Wi-Fi, then the probe is repeated.
    """

    if dry_run or probe(url):
        return

    if interactive is None:
        interactive = sys.stdin.isatty()

    if os_id == OS_RASPBIAN and interactive:
        logger.info("No network; launching raspi-config")
        try:
            run_cmd(["raspi-config"], check=False, capture=False)
        except OSError as e:
            logger.warning("Cannot run raspi-config: %s", e)
        else:
            if probe(url):
                return

    raise NetworkUnavailable(f"Cannot reach {url}; configure networking and re-run")
