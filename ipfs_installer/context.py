from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .config import ProvisioningConfig
from .lib.accounts import AccountManager
from .lib.autostart import CronTable, InitSystem
from .lib.download import Downloader
from .lib.env import Paths
from .lib.firewall import Firewall
from .lib.node import IpfsNode
from .lib.pkg import AptPackageManager


@dataclass(frozen=True)
class Toolbox:
    """External collaborators the steps drive."""

    packages: Any
    downloader: Any
    accounts: Any
    node: Any
    init_system: Any
    cron: Any
    firewall: Any

    @classmethod
    def for_host(cls, *, dry_run: bool = False) -> "Toolbox":
        return cls(
            packages=AptPackageManager(dry_run=dry_run),
            downloader=Downloader(dry_run=dry_run),
            accounts=AccountManager(dry_run=dry_run),
            node=IpfsNode(dry_run=dry_run),
            init_system=InitSystem(dry_run=dry_run),
            cron=CronTable(dry_run=dry_run),
            firewall=Firewall(dry_run=dry_run),
        )


@dataclass
class ProvisioningContext:
    config: ProvisioningConfig
    paths: Paths
    tools: Toolbox
    state: Dict[str, Any] = field(default_factory=dict)

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run
