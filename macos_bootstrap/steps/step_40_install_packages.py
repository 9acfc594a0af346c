from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib import brew
from ..lib.manifests import load_manifest
from ..pipeline import ErrorPolicy
from ..state_store import record_warning

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "40_install_packages"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}

        specs = brew.specs_from_manifest(load_manifest("packages", manifests_dir=cfg.get("manifests_dir")))
        brew.ensure_on_path(dry_run=ctx.dry_run)

        logger.info("Installing/upgrading %d packages...", len(specs))
        report = brew.apply_packages(specs, dry_run=ctx.dry_run)

        state.setdefault("execution", {}).setdefault("plan", {})["packages"] = [
            {"id": s.identifier, "kind": s.kind.value} for s in specs
        ]
        if report.failed:
            record_warning(state, step=self.step_id, packages_failed=report.failed)
        return state
