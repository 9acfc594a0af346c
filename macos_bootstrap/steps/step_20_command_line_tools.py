from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib.xcode import wait_for_command_line_tools
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class CommandLineToolsStep:
    step_id = "20_command_line_tools"
    error_policy = ErrorPolicy.FATAL
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}

        result = wait_for_command_line_tools(
            timeout=float(cfg.get("clt_timeout", 900)),
            interval=float(cfg.get("clt_poll_interval", 5)),
            dry_run=ctx.dry_run,
        )

        state.setdefault("execution", {}).setdefault("decisions", {})["command_line_tools"] = {
            "path": result.probe.path,
            "signal": result.probe.signal,
            "triggered": result.triggered,
            "elapsed": result.elapsed,
        }
        return state
