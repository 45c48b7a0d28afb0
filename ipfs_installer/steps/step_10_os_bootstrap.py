from __future__ import annotations

import logging

from ..context import ProvisioningContext
from ..state_store import is_step_applied
from ..templates import AUTOSTART_CRON

logger = logging.getLogger(__name__)

BASE_PACKAGES = ["ca-certificates", "curl", "git", "tar", "sudo"]


class OsBootstrapStep:
    """One-time apt refresh and base packages; guarded by the applied-steps record."""

    step_id = "os-updated"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        return is_step_applied(ctx.state, self.step_id)

    def packages(self, ctx: ProvisioningContext) -> list[str]:
        pkgs = list(BASE_PACKAGES)
        if ctx.config.runtime_version is None:
            # No pinned Go: build with the distro toolchain.
            pkgs.append("golang")
        if ctx.config.autostart == AUTOSTART_CRON:
            pkgs.append("cron")
        return pkgs

    def run(self, ctx: ProvisioningContext) -> None:
        apt = ctx.tools.packages
        apt.update()
        apt.upgrade(full=False)
        pkgs = self.packages(ctx)
        apt.install(pkgs)
        logger.info("OS bootstrapped (packages=%s)", ",".join(pkgs))
