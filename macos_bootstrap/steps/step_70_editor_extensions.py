from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..lib.manifests import load_manifest
from ..lib.vscode import install_extensions
from ..pipeline import ErrorPolicy
from ..state_store import record_warning

logger = logging.getLogger(__name__)


class EditorExtensionsStep:
    step_id = "70_editor_extensions"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        manifest = load_manifest("editor", manifests_dir=cfg.get("manifests_dir"))
        extensions = [str(e).strip() for e in (manifest.get("vscode_extensions") or []) if str(e).strip()]

        result = install_extensions(extensions, dry_run=ctx.dry_run)
        if result["failed"]:
            record_warning(state, step=self.step_id, extensions_failed=result["failed"])
        return state
