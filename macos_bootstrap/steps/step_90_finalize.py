from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib.system import ensure_dirs
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class FinalizeStep:
    step_id = "90_finalize"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}

        logger.info("Creating folder structure...")
        ensure_dirs(cfg.get("workspace_dirs") or [], dry_run=ctx.dry_run)

        exe = state.get("execution") or {}
        logger.info("Finalize summary: %s", exe.get("decisions") or {})
        if exe.get("warnings"):
            logger.warning("Completed with %d warning(s); see state file", len(exe["warnings"]))
        logger.info("Bootstrapping complete")
        return state
