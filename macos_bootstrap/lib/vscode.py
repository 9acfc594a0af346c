from __future__ import annotations

import logging
import shutil
from typing import Dict, List, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def install_extensions(extensions: Sequence[str], *, dry_run: bool = False) -> Dict[str, List[str]]:
    """Install VS Code extensions one by one; failures are only warnings."""

    result: Dict[str, List[str]] = {"installed": [], "failed": []}
    if not dry_run and shutil.which("code") is None:
        logger.info("VS Code CLI `code` not on PATH; skipping extensions")
        return result

    logger.info("Installing VS Code extensions...")
    for ext in extensions:
        r = run_cmd(["code", "--install-extension", ext], check=False, dry_run=dry_run)
        if r.ok:
            result["installed"].append(ext)
        else:
            logger.warning("VSCode extension %s failed.", ext)
            result["failed"].append(ext)
    return result
