from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

DEFAULT_STATE_PATH = ".ipfs-installer-state.json"
DEFAULT_LOG_PATH = "/var/log/ipfs-installer.log"

UNIT_NAME = "ipfs.service"
SEARCH_DIRS = ("/usr/local/sbin", "/usr/local/bin", "/usr/sbin", "/usr/bin", "/sbin", "/bin")


@dataclass(frozen=True)
class Paths:
    """Host locations touched by the installer.

    Attributes return in-host paths (what goes into unit files and commands);
    rooted() maps them onto the filesystem being provisioned, which is only
    different from the host when --root points at a mounted image.
    """

    root: str = "/"
    user: str = "ipfs"

    def rooted(self, p: PurePosixPath | str) -> Path:
        rel = PurePosixPath(p).relative_to("/")
        return Path(self.root) / rel

    @property
    def home(self) -> PurePosixPath:
        return PurePosixPath("/home") / self.user

    @property
    def ipfs_path(self) -> PurePosixPath:
        return self.home / ".ipfs"

    @property
    def node_config(self) -> PurePosixPath:
        return self.ipfs_path / "config"

    @property
    def profile(self) -> PurePosixPath:
        return self.home / ".profile"

    @property
    def daemon_log(self) -> PurePosixPath:
        return self.home / "ipfs-daemon.log"

    @property
    def node_binary(self) -> PurePosixPath:
        return PurePosixPath("/usr/local/bin/ipfs")

    @property
    def go_root(self) -> PurePosixPath:
        return PurePosixPath("/usr/local/go")

    @property
    def cache_dir(self) -> PurePosixPath:
        return PurePosixPath("/var/cache/ipfs-installer")

    @property
    def go_path(self) -> PurePosixPath:
        return self.cache_dir / "gopath"

    @property
    def unit_file(self) -> PurePosixPath:
        return PurePosixPath("/etc/systemd/system") / UNIT_NAME

    @property
    def cron_file(self) -> PurePosixPath:
        return PurePosixPath("/etc/cron.d/ipfs")

    def search_path(self) -> str:
        return os.pathsep.join(str(self.rooted(d)) for d in SEARCH_DIRS)
