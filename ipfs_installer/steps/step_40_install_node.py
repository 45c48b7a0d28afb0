from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

from ..context import ProvisioningContext
from ..errors import DownloadVerificationFailed

logger = logging.getLogger(__name__)

DISTRO_GO = PurePosixPath("/usr/bin/go")


def go_binary(ctx: ProvisioningContext) -> PurePosixPath:
    if ctx.config.runtime_version is None:
        return DISTRO_GO
    return ctx.paths.go_root / "bin" / "go"


class InstallNodeStep:
    step_id = "node-installed"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        found = shutil.which(ctx.paths.node_binary.name, path=ctx.paths.search_path())
        if found is None:
            return False
        return Path(found).resolve() == ctx.paths.rooted(ctx.paths.node_binary).resolve()

    def run(self, ctx: ProvisioningContext) -> None:
        binary = ctx.paths.node_binary
        ctx.tools.node.install(
            go_binary=str(go_binary(ctx)),
            version=ctx.config.node_version,
            gobin=str(binary.parent),
            gopath=str(ctx.paths.go_path),
        )

        if not ctx.dry_run and not ctx.paths.rooted(binary).exists():
            raise DownloadVerificationFailed(f"ipfs {ctx.config.node_version} did not end up at {binary}")

        logger.info("ipfs %s installed at %s", ctx.config.node_version, binary)
