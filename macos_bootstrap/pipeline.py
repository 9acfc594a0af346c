from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import RunContext
from .errors import FatalError
from .state_store import is_step_completed, mark_step_completed, record_warning

logger = logging.getLogger(__name__)


class ErrorPolicy(str, enum.Enum):
    """What a step failure does to the run."""

    FATAL = "fatal"
    WARN_AND_CONTINUE = "warn_and_continue"


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    error_policy: ErrorPolicy
    # Steps holding per-run resources (e.g. the sudo grant) must not be
    # skipped on resume.
    always_run: bool

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]
    warned_steps: List[str]


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    ctx: RunContext,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> PipelineResult:
    """Run steps in order with resume/idempotency semantics.

    FatalError always propagates. Any other exception propagates only from a
    FATAL step; from a WARN_AND_CONTINUE step it becomes a warning and the step
    stays uncompleted so the next run retries it.
    """

    ran: List[str] = []
    skipped: List[str] = []
    warned: List[str] = []

    started = start_at is None

    for step in steps:
        always_run = bool(getattr(step, "always_run", False))
        if not started:
            if step.step_id == start_at:
                started = True
            elif not always_run:
                continue

        state.setdefault("execution", {})["current_step"] = step.step_id

        if (not force) and (not always_run) and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.info("Running step %s", step.step_id)
            try:
                state = step.run(state, ctx)
            except FatalError:
                raise
            except Exception as e:
                if step.error_policy is ErrorPolicy.FATAL:
                    raise
                logger.warning("Step %s failed, continuing: %s", step.step_id, e)
                record_warning(state, step=step.step_id, error=str(e))
                warned.append(step.step_id)
            else:
                mark_step_completed(state, step.step_id)
                ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped, warned_steps=warned)
