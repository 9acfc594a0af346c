"""System settings, software update policy, folders and editor extensions."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from macos_bootstrap.lib import sudo, system, vscode

from .helpers import FakeRunner, fail, ok


def test_software_update_skipped_when_sudo_would_prompt(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sudo, "run_cmd", FakeRunner(lambda argv: fail(argv)))
    runner = FakeRunner()
    monkeypatch.setattr(system, "run_cmd", runner)

    assert system.run_software_update("if_passwordless") == "skipped"
    assert runner.calls == []


def test_software_update_runs_with_passwordless_sudo(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sudo, "run_cmd", FakeRunner())
    runner = FakeRunner()
    monkeypatch.setattr(system, "run_cmd", runner)

    assert system.run_software_update("if_passwordless") == "installed"
    assert runner.calls == [["sudo", "-n", "softwareupdate", "-ia"]]


def test_software_update_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(system, "run_cmd", FakeRunner(lambda argv: fail(argv)))
    assert system.run_software_update("always") == "failed"


def test_software_update_policy_is_validated() -> None:
    assert system.run_software_update("never") == "skipped"
    with pytest.raises(ValueError):
        system.run_software_update("sometimes")


def test_ensure_dirs_is_idempotent(tmp_path: Path) -> None:
    target = tmp_path / "development"

    assert system.ensure_dirs([str(target)]) == [str(target)]
    assert system.ensure_dirs([str(target)]) == []
    assert target.is_dir()


def test_extensions_continue_past_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(vscode.shutil, "which", lambda name: "/usr/local/bin/code")

    def responder(argv: List[str]):
        return fail(argv) if argv[-1] == "bad.ext" else ok(argv)

    monkeypatch.setattr(vscode, "run_cmd", FakeRunner(responder))

    result = vscode.install_extensions(["ms-python.python", "bad.ext", "redhat.vscode-yaml"])

    assert result == {"installed": ["ms-python.python", "redhat.vscode-yaml"], "failed": ["bad.ext"]}


def test_extensions_skipped_without_code_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(vscode.shutil, "which", lambda name: None)
    runner = FakeRunner()
    monkeypatch.setattr(vscode, "run_cmd", runner)

    assert vscode.install_extensions(["ms-python.python"]) == {"installed": [], "failed": []}
    assert runner.calls == []
