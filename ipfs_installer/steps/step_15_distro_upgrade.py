from __future__ import annotations

import logging

from ..context import ProvisioningContext
from ..state_store import is_step_applied

logger = logging.getLogger(__name__)


class DistroUpgradeStep:
    step_id = "distro-upgraded"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        return (not ctx.config.distro_upgrade) or is_step_applied(ctx.state, self.step_id)

    def run(self, ctx: ProvisioningContext) -> None:
        ctx.tools.packages.upgrade(full=True)
        logger.info("Distribution upgraded")
