from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from .command import run_cmd
from .sudo import has_passwordless_sudo

logger = logging.getLogger(__name__)

SOFTWARE_UPDATE_POLICIES = {"if_passwordless", "always", "never"}


def show_library_folder(home: str, *, dry_run: bool = False) -> bool:
    r = run_cmd(["chflags", "nohidden", str(Path(home) / "Library")], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("chflags nohidden ~/Library failed")
    return r.ok


def enable_restart_on_freeze(*, dry_run: bool = False) -> bool:
    r = run_cmd(["systemsetup", "-setrestartfreeze", "on"], check=False, sudo=True, dry_run=dry_run)
    if not r.ok:
        logger.warning("systemsetup unavailable.")
    return r.ok


def run_software_update(policy: str = "if_passwordless", *, dry_run: bool = False) -> str:
    """Install all available macOS updates according to policy.

    Returns what happened: "skipped", "installed" or "failed".
    """

    if policy not in SOFTWARE_UPDATE_POLICIES:
        raise ValueError(f"software_update must be one of {sorted(SOFTWARE_UPDATE_POLICIES)}, got {policy!r}")
    if policy == "never":
        return "skipped"
    if policy == "if_passwordless" and not has_passwordless_sudo(dry_run=dry_run):
        logger.warning("Skipping softwareupdate: sudo would prompt")
        return "skipped"

    logger.info("Running macOS Software Updates...")
    r = run_cmd(["softwareupdate", "-ia"], check=False, sudo=True, capture=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("softwareupdate failed/was interrupted.")
        return "failed"
    return "installed"


def ensure_dirs(paths: Iterable[str], *, dry_run: bool = False) -> List[str]:
    created: List[str] = []
    for raw in paths:
        p = Path(raw).expanduser()
        if p.is_dir():
            continue
        if dry_run:
            logger.info("Would create %s", p)
        else:
            p.mkdir(parents=True, exist_ok=True)
            logger.info("Created %s", p)
        created.append(str(p))
    return created
