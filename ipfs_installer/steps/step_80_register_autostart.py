from __future__ import annotations

import logging
from pathlib import Path

from ..context import ProvisioningContext
from ..lib.env import UNIT_NAME
from ..lib.files import read_text
from ..state_store import is_step_applied
from ..templates import AUTOSTART_SYSTEMD, AutostartSpec, render_autostart

logger = logging.getLogger(__name__)


def autostart_spec(ctx: ProvisioningContext) -> AutostartSpec:
    cfg = ctx.config
    return AutostartSpec(
        user=cfg.service_user,
        executable=str(ctx.paths.node_binary),
        environment={
            "IPFS_PATH": str(ctx.paths.ipfs_path),
            "IPFS_FD_MAX": str(cfg.open_files_limit),
        },
        flags=tuple(cfg.daemon_flags),
        open_files_limit=cfg.open_files_limit,
        log_file=str(ctx.paths.daemon_log),
    )


class RegisterAutostartStep:
    """systemd unit or @reboot cron entry.

    The descriptor is declarative; it is rewritten whenever the rendered text
    differs from what is on disk.
    """

    step_id = "autostart-registered"

    def target(self, ctx: ProvisioningContext) -> Path:
        if ctx.config.autostart == AUTOSTART_SYSTEMD:
            return ctx.paths.rooted(ctx.paths.unit_file)
        return ctx.paths.rooted(ctx.paths.cron_file)

    def render(self, ctx: ProvisioningContext) -> str:
        return render_autostart(ctx.config.autostart, autostart_spec(ctx))

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        if not is_step_applied(ctx.state, self.step_id):
            return False
        return read_text(self.target(ctx)) == self.render(ctx)

    def run(self, ctx: ProvisioningContext) -> None:
        text = self.render(ctx)
        path = self.target(ctx)

        if ctx.config.autostart == AUTOSTART_SYSTEMD:
            init = ctx.tools.init_system
            init.register_unit(path, text)
            init.enable(UNIT_NAME)
            init.start(UNIT_NAME)
        else:
            ctx.tools.cron.register(path, text)

        logger.info("Autostart registered (%s -> %s)", ctx.config.autostart, str(path))
