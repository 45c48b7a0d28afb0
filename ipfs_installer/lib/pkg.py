from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


@dataclass(frozen=True)
class AptPackageManager:
    """apt-get on the running host."""

    dry_run: bool = False

    def update(self) -> None:
        run_cmd(["apt-get", "update"], env=_APT_ENV, dry_run=self.dry_run)

    def upgrade(self, *, full: bool = False) -> None:
        action = "full-upgrade" if full else "upgrade"
        run_cmd(["apt-get", action, "-y"], env=_APT_ENV, dry_run=self.dry_run)
        if full:
            run_cmd(["apt-get", "autoremove", "-y"], env=_APT_ENV, dry_run=self.dry_run)

    def install(self, packages: Sequence[str], *, with_recommends: bool = False) -> None:
        if not packages:
            return
        argv = ["apt-get", "install", "-y"]
        if not with_recommends:
            argv.append("--no-install-recommends")
        run_cmd([*argv, *packages], env=_APT_ENV, dry_run=self.dry_run)
