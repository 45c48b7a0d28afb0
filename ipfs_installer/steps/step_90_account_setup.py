from __future__ import annotations

import logging

from ..context import ProvisioningContext
from ..lib.files import append_text, read_text

logger = logging.getLogger(__name__)

MARKER = "# ipfs-installer"


def profile_block(ctx: ProvisioningContext) -> str:
    lines = [MARKER, f"export IPFS_PATH={ctx.paths.ipfs_path}"]
    if ctx.config.runtime_version is not None:
        lines.append(f"export PATH=$PATH:{ctx.paths.go_root}/bin")
    return "\n".join(lines) + "\n"


class AccountSetupStep:
    """Shell environment for the service account, then hand it its home."""

    step_id = "account-configured"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        current = read_text(ctx.paths.rooted(ctx.paths.profile)) or ""
        return MARKER in current.splitlines()

    def run(self, ctx: ProvisioningContext) -> None:
        profile = ctx.paths.rooted(ctx.paths.profile)
        current = read_text(profile) or ""
        block = profile_block(ctx)
        if current and not current.endswith("\n"):
            block = "\n" + block
        append_text(profile, block, dry_run=ctx.dry_run)

        ctx.tools.accounts.chown_tree(ctx.config.service_user, str(ctx.paths.home))
        logger.info("Account %s configured", ctx.config.service_user)
