"""Step sequencing, error policy and resume."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from macos_bootstrap.context import RunContext
from macos_bootstrap.errors import AuthError, ValidationError
from macos_bootstrap.pipeline import ErrorPolicy, run_pipeline
from macos_bootstrap.state_store import ensure_defaults


class FakeStep:
    def __init__(
        self,
        step_id: str,
        policy: ErrorPolicy = ErrorPolicy.WARN_AND_CONTINUE,
        *,
        error: Optional[Exception] = None,
        always_run: bool = False,
        log: Optional[List[str]] = None,
    ) -> None:
        self.step_id = step_id
        self.error_policy = policy
        self.always_run = always_run
        self._error = error
        self._log = log if log is not None else []

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        self._log.append(self.step_id)
        if self._error is not None:
            raise self._error
        return state


def _state() -> Dict[str, Any]:
    return ensure_defaults({})


def test_warned_step_does_not_stop_later_steps() -> None:
    log: List[str] = []
    steps = [
        FakeStep("10_a", log=log),
        FakeStep("20_b", error=RuntimeError("flaky"), log=log),
        FakeStep("30_c", log=log),
    ]

    result = run_pipeline(state=_state(), steps=steps, ctx=RunContext())

    assert log == ["10_a", "20_b", "30_c"]
    assert result.ran_steps == ["10_a", "30_c"]
    assert result.warned_steps == ["20_b"]
    assert result.state["execution"]["warnings"] == [{"step": "20_b", "error": "flaky"}]
    assert "20_b" not in result.state["execution"]["completed_steps"]


def test_fatal_policy_unwinds() -> None:
    log: List[str] = []
    steps = [FakeStep("10_a", ErrorPolicy.FATAL, error=RuntimeError("no brew"), log=log), FakeStep("20_b", log=log)]

    with pytest.raises(RuntimeError, match="no brew"):
        run_pipeline(state=_state(), steps=steps, ctx=RunContext())

    assert log == ["10_a"]


def test_fatal_error_unwinds_even_from_warn_step() -> None:
    log: List[str] = []
    steps = [FakeStep("10_a", error=ValidationError("empty"), log=log), FakeStep("20_b", log=log)]

    with pytest.raises(ValidationError):
        run_pipeline(state=_state(), steps=steps, ctx=RunContext())

    assert log == ["10_a"]


def test_completed_steps_are_skipped_except_always_run() -> None:
    state = _state()
    state["execution"]["completed_steps"] = ["10_priv", "20_b"]
    log: List[str] = []
    steps = [FakeStep("10_priv", always_run=True, log=log), FakeStep("20_b", log=log), FakeStep("30_c", log=log)]

    result = run_pipeline(state=state, steps=steps, ctx=RunContext())

    assert log == ["10_priv", "30_c"]
    assert result.skipped_steps == ["20_b"]


def test_force_reruns_completed_steps() -> None:
    state = _state()
    state["execution"]["completed_steps"] = ["20_b"]
    log: List[str] = []

    run_pipeline(state=state, steps=[FakeStep("20_b", log=log)], ctx=RunContext(), force=True)

    assert log == ["20_b"]


def test_start_at_and_stop_after_keep_always_run_steps() -> None:
    log: List[str] = []
    steps = [
        FakeStep("10_priv", always_run=True, log=log),
        FakeStep("20_b", log=log),
        FakeStep("30_c", log=log),
        FakeStep("40_d", log=log),
    ]

    result = run_pipeline(state=_state(), steps=steps, ctx=RunContext(), start_at="30_c", stop_after="30_c")

    assert log == ["10_priv", "30_c"]
    assert result.state["execution"]["current_step"] is None


def test_auth_error_from_fatal_step() -> None:
    with pytest.raises(AuthError):
        run_pipeline(
            state=_state(),
            steps=[FakeStep("10_priv", ErrorPolicy.FATAL, error=AuthError("declined"))],
            ctx=RunContext(),
        )
