from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Optional[Mapping[str, str]] = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run one host command for a provisioning step.

    env entries are layered over the installer's own environment (apt needs
    DEBIAN_FRONTEND, go needs GOBIN). Output is captured into the debug log
    unless capture is False, which leaves the terminal to interactive tools
    such as raspi-config. In a dry run the command is only logged.
    """

    args = [str(a) for a in argv]
    shown = shlex.join(args)
    extra = " ".join(f"{k}={v}" for k, v in (env or {}).items())
    logger.info("CMD %s%s", f"{extra} " if extra else "", shown)

    if dry_run:
        return CmdResult(argv=args, returncode=0)

    stream = subprocess.PIPE if capture else None
    proc = subprocess.run(
        args,
        text=True,
        stdout=stream,
        stderr=stream,
        env={**os.environ, **(env or {})},
    )
    result = CmdResult(argv=args, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")

    for name, output in (("stdout", result.stdout), ("stderr", result.stderr)):
        if output.strip():
            logger.debug("%s of %s:\n%s", name, args[0], output.rstrip())

    if check and not result.ok:
        raise RuntimeError(f"Command failed ({result.returncode}): {shown}\n{result.stderr.strip()}")
    return result
