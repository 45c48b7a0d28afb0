from __future__ import annotations

import logging
import os
import sys
from typing import Any, Callable, Dict, Optional, Sequence

from .config import ProvisioningConfig, build_parser, parse_args, persistable, resolve_config
from .context import ProvisioningContext, Toolbox
from .errors import InstallerError, InvalidArgument, PrivilegeRequired
from .lib.env import DEFAULT_STATE_PATH, Paths
from .lib.hostinfo import probe_host
from .lib.net import ensure_online, is_online
from .logging_utils import configure_logging
from .pipeline import RunLog, run_pipeline, wait_for_keypress
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    AccountSetupStep,
    DistroUpgradeStep,
    InitNodeStep,
    InstallNodeStep,
    InstallRuntimeStep,
    OpenFirewallStep,
    OsBootstrapStep,
    RegisterAutostartStep,
    ServiceAccountStep,
    StorageQuotaStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        OsBootstrapStep(),
        DistroUpgradeStep(),
        ServiceAccountStep(),
        InstallRuntimeStep(),
        InstallNodeStep(),
        InitNodeStep(),
        OpenFirewallStep(),
        StorageQuotaStep(),
        RegisterAutostartStep(),
        AccountSetupStep(),
    ]


def ensure_privileges(*, dry_run: bool) -> None:
    if dry_run:
        return
    if os.geteuid() != 0:
        raise PrivilegeRequired("ipfs-installer must run as root (try sudo)")


def run(
    config: ProvisioningConfig,
    *,
    state_path: str = DEFAULT_STATE_PATH,
    state: Optional[Dict[str, Any]] = None,
    tools: Optional[Toolbox] = None,
    confirm: Callable[[str], None] = wait_for_keypress,
    probe: Callable[[str], bool] = is_online,
    run_log: Optional[RunLog] = None,
) -> RunLog:
    """Provision the host, persisting applied steps for resume."""

    ensure_privileges(dry_run=config.dry_run)
    ensure_online(config.detected_os, probe=probe, dry_run=config.dry_run)

    state = ensure_defaults(state if state is not None else load_state(state_path))
    state["config"] = persistable(config)

    ctx = ProvisioningContext(
        config=config,
        paths=Paths(root=config.root, user=config.service_user),
        tools=tools or Toolbox.for_host(dry_run=config.dry_run),
        state=state,
    )

    # dry runs never record progress
    checkpoint = None if config.dry_run else (lambda s: save_state(state_path, s))
    log = run_log if run_log is not None else RunLog()

    try:
        return run_pipeline(
            ctx=ctx,
            steps=build_steps(),
            state=state,
            checkpoint=checkpoint,
            run_log=log,
            pause=confirm if config.pause_after_step else None,
        )
    except Exception:
        logger.exception("Installer failed")
        raise
    finally:
        if checkpoint is not None:
            checkpoint(state)
        for rec in log.records:
            logger.info("step=%s outcome=%s%s", rec.step_id, rec.outcome, f" error={rec.error}" if rec.error else "")


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = parse_args(argv)
        try:
            state = load_state(args.state)
        except ValueError as e:
            raise InvalidArgument(f"Cannot read state file {args.state}: {e}") from e
        facts = probe_host(args.root)
        config = resolve_config(args, facts, state.get("config") or {})
    except InvalidArgument as e:
        build_parser().print_usage(sys.stderr)
        print(f"ipfs-installer: error: {e}", file=sys.stderr)
        return e.exit_code
    except InstallerError as e:
        print(f"ipfs-installer: error: {e}", file=sys.stderr)
        return e.exit_code

    configure_logging(log_path=args.log)

    try:
        log = run(config, state_path=args.state, state=state)
    except InstallerError as e:
        print(f"ipfs-installer: error: {e}", file=sys.stderr)
        return e.exit_code

    print(f"ipfs-installer: done ({log.summary()})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
