from __future__ import annotations

import logging

from ..context import ProvisioningContext

logger = logging.getLogger(__name__)


class ServiceAccountStep:
    step_id = "user-created"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        return ctx.paths.rooted(ctx.paths.home).is_dir()

    def run(self, ctx: ProvisioningContext) -> None:
        user = ctx.config.service_user
        home = ctx.paths.home
        accounts = ctx.tools.accounts

        if accounts.exists(user):
            # Account left over without its home directory.
            if not ctx.dry_run:
                ctx.paths.rooted(home).mkdir(parents=True, exist_ok=True)
            accounts.chown_tree(user, str(home))
        else:
            accounts.create_user(user, str(home))

        logger.info("Service account %s ready (home=%s)", user, home)
