from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Sequence

from .errors import StepExecutionFailed
from .state_store import mark_step_applied

logger = logging.getLogger(__name__)

Outcome = Literal["skipped", "succeeded", "failed"]


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def is_applied(self, ctx: Any) -> bool:
        ...

    def run(self, ctx: Any) -> None:
        ...


@dataclass(frozen=True)
class RunRecord:
    step_id: str
    outcome: Outcome
    timestamp: float
    error: Optional[str] = None


@dataclass
class RunLog:
    records: List[RunRecord] = field(default_factory=list)

    def add(self, step_id: str, outcome: Outcome, error: Optional[str] = None) -> RunRecord:
        rec = RunRecord(step_id=step_id, outcome=outcome, timestamp=time.time(), error=error)
        self.records.append(rec)
        return rec

    def ids(self, outcome: Outcome) -> List[str]:
        return [r.step_id for r in self.records if r.outcome == outcome]

    @property
    def ran_steps(self) -> List[str]:
        return self.ids("succeeded")

    @property
    def skipped_steps(self) -> List[str]:
        return self.ids("skipped")

    def summary(self) -> str:
        return "succeeded={} skipped={} failed={}".format(
            len(self.ids("succeeded")), len(self.ids("skipped")), len(self.ids("failed"))
        )


def wait_for_keypress(step_id: str) -> None:
    input(f"[{step_id}] done. Press Enter to continue... ")


def run_pipeline(
    *,
    ctx: Any,
    steps: Sequence[Step],
    state: Dict[str, Any],
    checkpoint: Optional[Callable[[Dict[str, Any]], None]] = None,
    run_log: Optional[RunLog] = None,
    pause: Optional[Callable[[str], None]] = None,
) -> RunLog:
    """Run steps in order, skipping those whose precondition holds.

    The first failure stops the run; nothing already done is undone. A rerun
    picks up where this one stopped because finished steps are skipped.
    A precondition that raises fails its step the same way the action would.
    """

    log = run_log if run_log is not None else RunLog()

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id

        try:
            applied = step.is_applied(ctx)
            if applied:
                logger.info("Skipping step %s (already applied)", step.step_id)
            else:
                logger.info("Running step %s", step.step_id)
                step.run(ctx)
        except Exception as e:
            log.add(step.step_id, "failed", error=str(e))
            logger.error("Step %s failed: %s", step.step_id, e)
            raise StepExecutionFailed(step.step_id, e) from e

        if applied:
            log.add(step.step_id, "skipped")
        else:
            log.add(step.step_id, "succeeded")
            mark_step_applied(state, step.step_id)
            if checkpoint is not None:
                checkpoint(state)

        if pause is not None:
            pause(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    logger.info("Pipeline finished (%s)", log.summary())
    return log
