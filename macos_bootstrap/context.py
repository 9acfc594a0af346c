from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .lib.sudo import PrivilegeSession


@dataclass
class RunContext:
    """Per-run collaborators that cannot live in the persisted state."""

    dry_run: bool = False
    prompt: Callable[[str], str] = input
    # Closed by main.run() when the pipeline ends, on success or failure.
    resources: ExitStack = field(default_factory=ExitStack)
    session: Optional["PrivilegeSession"] = None
