from __future__ import annotations

import logging

from ..context import ProvisioningContext

logger = logging.getLogger(__name__)


class InitNodeStep:
    """ipfs init for the service account.

    Guarded by the repo config file: re-running init would discard the
    node identity and pinned data.
    """

    step_id = "node-initialized"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        return ctx.paths.rooted(ctx.paths.node_config).exists()

    def run(self, ctx: ProvisioningContext) -> None:
        ctx.tools.node.init(
            binary=str(ctx.paths.node_binary),
            user=ctx.config.service_user,
            ipfs_path=str(ctx.paths.ipfs_path),
            profile=ctx.config.init_profile,
        )
        logger.info("Initialized IPFS repo at %s (profile=%s)", ctx.paths.ipfs_path, ctx.config.init_profile)
