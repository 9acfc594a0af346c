from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import RunContext
from ..lib import brew, shell
from ..lib.manifests import load_manifest
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class ConfigureShellStep:
    step_id = "50_configure_shell"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = ctx.dry_run
        home = str(Path.home())

        prefix = brew.ensure_on_path(dry_run=dry_run)
        shell.install_fzf_bindings(prefix, dry_run=dry_run)

        if bool(cfg.get("install_oh_my_zsh", True)):
            shell.install_oh_my_zsh(home, dry_run=dry_run)

        manifest = load_manifest("shell", manifests_dir=cfg.get("manifests_dir"))
        lines = manifest.get("completions") or []
        if not isinstance(lines, list):
            raise RuntimeError("manifests/shell.yaml: completions must be a list of lines")
        shell.ensure_completion_block(str(Path(home) / ".zshrc"), lines, prefix, dry_run=dry_run)

        shell.ensure_default_shell(str(cfg.get("default_shell") or "/bin/zsh"), dry_run=dry_run)
        return state
