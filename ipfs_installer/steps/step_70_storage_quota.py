from __future__ import annotations

import logging

from ..context import ProvisioningContext
from ..lib.node_config import apply_storage_quota, quota_value, read_storage_max

logger = logging.getLogger(__name__)


class StorageQuotaStep:
    step_id = "quota-set"

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        path = ctx.paths.rooted(ctx.paths.node_config)
        if not path.exists():
            return False
        current = read_storage_max(path.read_text(encoding="utf-8"))
        return current == quota_value(ctx.config.storage_quota_gib)

    def run(self, ctx: ProvisioningContext) -> None:
        path = ctx.paths.rooted(ctx.paths.node_config)
        if not path.exists():
            if not ctx.dry_run:
                raise RuntimeError(f"{ctx.paths.node_config} missing; node-initialized must run first")
            logger.info("Would set StorageMax=%s", quota_value(ctx.config.storage_quota_gib))
            return
        apply_storage_quota(path, ctx.config.storage_quota_gib, dry_run=ctx.dry_run)
