from __future__ import annotations

import logging
import pwd
from dataclasses import dataclass

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountManager:
    dry_run: bool = False

    def exists(self, name: str) -> bool:
        try:
            pwd.getpwnam(name)
            return True
        except KeyError:
            return False

    def create_user(self, name: str, home_dir: str) -> None:
        run_cmd(
            [
                "useradd",
                "--system",
                "--create-home",
                "--home-dir",
                home_dir,
                "--shell",
                "/bin/bash",
                "--user-group",
                name,
            ],
            dry_run=self.dry_run,
        )

    def chown_tree(self, name: str, path: str) -> None:
        run_cmd(["chown", "-R", f"{name}:{name}", path], dry_run=self.dry_run)
