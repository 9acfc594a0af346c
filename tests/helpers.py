"""Fake command runner shared by tests."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from macos_bootstrap.errors import CommandError
from macos_bootstrap.lib.command import CmdResult


def ok(argv: Sequence[str], stdout: str = "") -> CmdResult:
    return CmdResult(argv=list(argv), returncode=0, stdout=stdout, stderr="")


def fail(argv: Sequence[str], stderr: str = "boom", returncode: int = 1) -> CmdResult:
    return CmdResult(argv=list(argv), returncode=returncode, stdout="", stderr=stderr)


class FakeRunner:
    """Stands in for run_cmd; records argv and answers from a responder.

    With ``strict=True`` a failed result raises CommandError when the caller
    passed ``check=True``, as the real run_cmd does.
    """

    def __init__(self, responder: Optional[Callable[[List[str]], CmdResult]] = None, *, strict: bool = False) -> None:
        self.calls: List[List[str]] = []
        self._responder = responder
        self._strict = strict

    def __call__(self, argv: Sequence[str], *, check: bool = True, sudo: bool = False, **kwargs) -> CmdResult:
        argv_list = list(argv)
        if sudo:
            argv_list = ["sudo", "-n", *argv_list]
        self.calls.append(argv_list)
        result = self._responder(argv_list) if self._responder is not None else ok(argv_list)
        if self._strict and check and not result.ok:
            raise CommandError(f"Command failed ({result.returncode}): {' '.join(argv_list)}", result=result)
        return result

    def matching(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]
