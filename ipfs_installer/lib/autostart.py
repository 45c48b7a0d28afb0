from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .command import run_cmd
from .files import write_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitSystem:
    """systemd on the provisioned host."""

    dry_run: bool = False

    def register_unit(self, path: Path, definition: str) -> None:
        write_file(path, definition, mode=0o644, dry_run=self.dry_run)
        run_cmd(["systemctl", "daemon-reload"], dry_run=self.dry_run)

    def enable(self, name: str) -> None:
        run_cmd(["systemctl", "enable", name], dry_run=self.dry_run)

    def start(self, name: str) -> None:
        # restart picks up a rewritten unit when the daemon is already up
        run_cmd(["systemctl", "restart", name], dry_run=self.dry_run)


@dataclass(frozen=True)
class CronTable:
    """/etc/cron.d drop-ins; cron rereads the directory on its own."""

    dry_run: bool = False

    def register(self, path: Path, definition: str) -> None:
        write_file(path, definition, mode=0o644, dry_run=self.dry_run)
