from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..context import RunContext
from ..lib import brew, identity
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class ConfigureIdentityStep:
    step_id = "60_configure_identity"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = ctx.dry_run

        ident = identity.resolve_identity(cfg.get("git_name"), cfg.get("git_email"), ctx.prompt)

        try:
            prefix = brew.ensure_on_path(dry_run=dry_run)
        except FileNotFoundError:
            # Only gpg.program depends on the prefix.
            prefix = os.environ.get("HOMEBREW_PREFIX", "/opt/homebrew")
            logger.warning("brew not found; assuming prefix %s", prefix)

        identity.configure_git(ident, editor=cfg.get("git_editor"), brew_prefix=prefix, dry_run=dry_run)

        key_path = str(cfg.get("ssh_key_path") or "~/.ssh/id_ed25519")
        identity.ensure_ssh_key(key_path, ident.email, dry_run=dry_run)
        identity.ensure_ssh_config("~/.ssh/config", key_path, dry_run=dry_run)

        state.setdefault("execution", {}).setdefault("decisions", {})["git_identity"] = {
            "name": ident.name,
            "email": ident.email,
        }
        logger.info("Git/SSH setup complete for %s <%s>.", ident.name, ident.email)
        return state
