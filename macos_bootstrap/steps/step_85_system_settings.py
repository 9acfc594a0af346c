from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import RunContext
from ..lib import system
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class SystemSettingsStep:
    step_id = "85_system_settings"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = ctx.dry_run

        system.show_library_folder(str(Path.home()), dry_run=dry_run)
        system.enable_restart_on_freeze(dry_run=dry_run)
        outcome = system.run_software_update(str(cfg.get("software_update", "if_passwordless")), dry_run=dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["software_update"] = outcome
        return state
