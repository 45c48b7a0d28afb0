from __future__ import annotations

import logging

from ..context import ProvisioningContext
from ..state_store import is_step_applied

logger = logging.getLogger(__name__)


class OpenFirewallStep:
    step_id = "firewall-opened"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        return (not ctx.config.install_firewall) or is_step_applied(ctx.state, self.step_id)

    def run(self, ctx: ProvisioningContext) -> None:
        ctx.tools.packages.install(["ufw"])
        ctx.tools.firewall.open_ports()
