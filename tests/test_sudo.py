"""Privilege session: acquire, keepalive, cancellation."""

from __future__ import annotations

import time
from typing import List

import pytest

from macos_bootstrap.errors import AuthError
from macos_bootstrap.lib import sudo
from macos_bootstrap.lib.sudo import PrivilegeSession, SessionState

from .helpers import FakeRunner, fail, ok


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_declined_prompt_raises_auth_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sudo, "run_cmd", FakeRunner(lambda argv: fail(argv)))

    with pytest.raises(AuthError):
        PrivilegeSession.acquire()


def test_missing_sudo_binary_raises_auth_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sudo, "run_cmd", FakeRunner(lambda argv: fail(argv, returncode=127)))

    with pytest.raises(AuthError) as excinfo:
        PrivilegeSession.acquire()

    assert excinfo.value.exit_code == 2


def test_acquire_authenticates_once(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = FakeRunner()
    monkeypatch.setattr(sudo, "run_cmd", runner)

    session = PrivilegeSession.acquire(interval=60)

    assert session.state is SessionState.AUTHENTICATED
    assert runner.calls == [["sudo", "-v"]]
    assert not session.renewing


def test_renewal_stops_within_one_interval_after_stop(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = FakeRunner()
    monkeypatch.setattr(sudo, "run_cmd", runner)
    session = PrivilegeSession.acquire(interval=0.01)

    with session:
        assert _wait_for(lambda: session.renewals >= 3)

    after_stop = session.renewals
    time.sleep(0.05)

    assert session.renewals == after_stop
    assert not session.renewing
    assert session.cancel_token.is_set()
    assert all(c == ["sudo", "-n", "true"] for c in runner.calls[1:])


def test_failed_renewal_marks_session_expired(monkeypatch: pytest.MonkeyPatch) -> None:

    def responder(argv: List[str]):
        return ok(argv) if argv == ["sudo", "-v"] else fail(argv)

    monkeypatch.setattr(sudo, "run_cmd", FakeRunner(responder))
    session = PrivilegeSession.acquire(interval=0.01)
    session.start_keepalive()
    try:
        assert _wait_for(lambda: session.state is SessionState.EXPIRED)
    finally:
        session.stop()


def test_keepalive_requires_authentication() -> None:
    with pytest.raises(AuthError):
        PrivilegeSession(interval=1).start_keepalive()


def test_passwordless_sudo_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sudo, "run_cmd", FakeRunner(lambda argv: fail(argv)))
    assert sudo.has_passwordless_sudo() is False
