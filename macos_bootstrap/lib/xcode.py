"""Command Line Tools detection and install-and-wait.

The Apple installer is triggered with ``xcode-select --install`` and runs
outside our control, so completion is observed by polling. On entry any
developer dir selected by ``xcode-select -p`` counts as installed, including
a full Xcode.app. While polling, two signals are checked because they
disagree transiently while the installer is still writing files:

- ``xcode-select -p`` returns a developer dir AND the CLT directory exists
- ``pkgutil --pkg-info`` finds the CLT package receipt
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..errors import InstallTimeoutError
from .command import run_cmd

logger = logging.getLogger(__name__)

CLT_DIR = "/Library/Developer/CommandLineTools"
CLT_RECEIPT_ID = "com.apple.pkg.CLTools_Executables"

DEFAULT_TIMEOUT = 900.0
DEFAULT_INTERVAL = 5.0


class WaiterState(str, enum.Enum):
    NOT_CHECKED = "not_checked"
    ALREADY_PRESENT = "already_present"
    INSTALL_TRIGGERED = "install_triggered"
    CONFIRMED = "confirmed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class InstallationProbe:
    present: bool
    path: Optional[str] = None
    # "xcode-select" or "pkgutil"
    signal: Optional[str] = None


@dataclass(frozen=True)
class WaitResult:
    state: WaiterState
    elapsed: float
    triggered: bool
    probe: InstallationProbe
    transitions: Tuple[WaiterState, ...] = ()


def developer_dir(*, dry_run: bool = False) -> Optional[str]:
    r = run_cmd(["xcode-select", "-p"], check=False, dry_run=dry_run)
    path = r.stdout.strip()
    if r.ok and path:
        return path
    return None


def has_receipt(package_id: str = CLT_RECEIPT_ID, *, dry_run: bool = False) -> bool:
    return run_cmd(["pkgutil", f"--pkg-info={package_id}"], check=False, dry_run=dry_run).ok


def probe(*, clt_dir: str = CLT_DIR, dry_run: bool = False) -> InstallationProbe:
    """Re-derive presence from system state."""

    if dry_run:
        return InstallationProbe(present=True, path=clt_dir, signal="dry-run")

    devdir = developer_dir()
    if devdir and Path(clt_dir).is_dir():
        return InstallationProbe(present=True, path=devdir, signal="xcode-select")
    if has_receipt():
        return InstallationProbe(present=True, path=devdir, signal="pkgutil")
    return InstallationProbe(present=False, path=devdir)


def initial_check(*, clt_dir: str = CLT_DIR, dry_run: bool = False) -> InstallationProbe:
    if not dry_run:
        devdir = developer_dir()
        if devdir:
            return InstallationProbe(present=True, path=devdir, signal="xcode-select")
    return probe(clt_dir=clt_dir, dry_run=dry_run)


def trigger_install(*, dry_run: bool = False) -> None:
    # Fails when the installer is already running or the dialog was dismissed
    # earlier; both are fine, polling decides.
    r = run_cmd(["xcode-select", "--install"], check=False, dry_run=dry_run)
    if not r.ok:
        logger.debug("xcode-select --install returned %s (ignored)", r.returncode)


def wait_for_command_line_tools(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
    clt_dir: str = CLT_DIR,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> WaitResult:
    """Ensure the Command Line Tools are installed, waiting up to ``timeout``.

    Elapsed time is accumulated from the poll interval rather than wall time,
    so the ceiling is reached after ``ceil(timeout / interval)`` polls.
    Raises InstallTimeoutError when it is exceeded.
    """

    if interval <= 0:
        raise ValueError("interval must be positive")

    history: List[WaiterState] = [WaiterState.NOT_CHECKED]
    found = initial_check(clt_dir=clt_dir, dry_run=dry_run)
    if found.present:
        logger.info("Xcode Command Line Tools already installed: %s", found.path)
        history += [WaiterState.ALREADY_PRESENT, WaiterState.CONFIRMED]
        return WaitResult(
            state=WaiterState.CONFIRMED, elapsed=0.0, triggered=False, probe=found, transitions=tuple(history)
        )

    logger.warning("Xcode Command Line Tools missing. Starting installation...")
    trigger_install(dry_run=dry_run)
    history.append(WaiterState.INSTALL_TRIGGERED)

    elapsed = 0.0
    while True:
        if elapsed >= timeout:
            history.append(WaiterState.TIMED_OUT)
            logger.error("Timed out waiting for Xcode Command Line Tools after %ss", timeout)
            raise InstallTimeoutError(
                f"Timed out waiting for Xcode Command Line Tools: exceeded {timeout:g}s "
                f"(polled every {interval:g}s)",
                elapsed=elapsed,
                transitions=tuple(history),
            )
        logger.info("Waiting for CLT installation to complete... (%gs)", elapsed)
        sleep(interval)
        elapsed += interval

        found = probe(clt_dir=clt_dir)
        if found.present:
            logger.info("Xcode Command Line Tools installed via %s after %gs", found.signal, elapsed)
            history.append(WaiterState.CONFIRMED)
            return WaitResult(
                state=WaiterState.CONFIRMED,
                elapsed=elapsed,
                triggered=True,
                probe=found,
                transitions=tuple(history),
            )
