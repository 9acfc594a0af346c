from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib.defaults import apply_preferences, edits_from_manifest
from ..lib.manifests import load_manifest
from ..lib.system import ensure_dirs
from ..pipeline import ErrorPolicy
from ..state_store import record_warning

logger = logging.getLogger(__name__)


class ApplyPreferencesStep:
    step_id = "80_apply_preferences"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}

        # screencapture silently ignores a location that does not exist.
        ensure_dirs([str(cfg.get("screenshots_dir") or "~/Desktop/Screenshots")], dry_run=ctx.dry_run)

        edits, restarts = edits_from_manifest(load_manifest("defaults", manifests_dir=cfg.get("manifests_dir")))
        logger.info("Configuring macOS defaults (%d settings)...", len(edits))
        report = apply_preferences(edits, restarts, dry_run=ctx.dry_run)

        if report.failed:
            record_warning(state, step=self.step_id, preferences_failed=report.failed)
        state.setdefault("execution", {}).setdefault("decisions", {})["restarted"] = report.restarted
        return state
