from __future__ import annotations

from typing import TYPE_CHECKING, Any, Tuple

if TYPE_CHECKING:
    from .lib.command import CmdResult


class BootstrapError(RuntimeError):
    """Base class for bootstrap failures."""


class CommandError(BootstrapError):
    def __init__(self, message: str, result: "CmdResult") -> None:
        super().__init__(message)
        self.result = result


class FatalError(BootstrapError):
    """Aborts the whole run regardless of the failing step's error policy."""

    exit_code = 1


class AuthError(FatalError):
    exit_code = 2


class InstallTimeoutError(FatalError):
    exit_code = 3

    def __init__(self, message: str, *, elapsed: float = 0.0, transitions: Tuple[Any, ...] = ()) -> None:
        super().__init__(message)
        self.elapsed = elapsed
        self.transitions = transitions


class ValidationError(FatalError):
    exit_code = 4
