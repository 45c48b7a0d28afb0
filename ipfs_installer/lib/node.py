from __future__ import annotations

import logging
from dataclasses import dataclass

from .command import run_cmd

logger = logging.getLogger(__name__)

KUBO_MODULE = "github.com/ipfs/kubo/cmd/ipfs"


def goarch(arch: str) -> str:
    """Map a Debian arch name to the Go release tarball arch suffix."""
    return {"amd64": "amd64", "arm64": "arm64", "armhf": "armv6l"}.get(arch, arch)


@dataclass(frozen=True)
class IpfsNode:
    """The ipfs (kubo) binary: built with the Go toolchain, run as the service account."""

    dry_run: bool = False

    def install(self, *, go_binary: str, version: str, gobin: str, gopath: str) -> None:
        ref = version if version == "latest" or version.startswith("v") else f"v{version}"
        run_cmd(
            [go_binary, "install", f"{KUBO_MODULE}@{ref}"],
            env={"GOBIN": gobin, "GOPATH": gopath, "CGO_ENABLED": "0"},
            dry_run=self.dry_run,
        )

    def init(self, *, binary: str, user: str, ipfs_path: str, profile: str) -> None:
        run_cmd(
            ["sudo", "-u", user, "env", f"IPFS_PATH={ipfs_path}", binary, "init", "--profile", profile],
            dry_run=self.dry_run,
        )
