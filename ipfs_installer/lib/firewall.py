from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

# ssh + IPFS swarm
DEFAULT_RULES = ("22/tcp", "4001/tcp", "4001/udp")


@dataclass(frozen=True)
class Firewall:
    """ufw front-end."""

    dry_run: bool = False

    def open_ports(self, rules: Sequence[str] = DEFAULT_RULES) -> None:
        for rule in rules:
            run_cmd(["ufw", "allow", rule], dry_run=self.dry_run)
        run_cmd(["ufw", "--force", "enable"], dry_run=self.dry_run)
        logger.info("Firewall enabled (allowed=%s)", ",".join(rules))
