from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib.sudo import PrivilegeSession
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class AcquirePrivilegesStep:
    step_id = "10_acquire_privileges"
    error_policy = ErrorPolicy.FATAL
    # The grant lives only as long as this process.
    always_run = True

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        interval = float(cfg.get("keepalive_interval", 60))

        session = PrivilegeSession.acquire(interval=interval, dry_run=ctx.dry_run)
        # Renewal stops when main.run() closes ctx.resources.
        ctx.session = ctx.resources.enter_context(session)

        state.setdefault("execution", {}).setdefault("decisions", {})["privileged"] = True
        return state
