from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import RunContext
from ..errors import BootstrapError
from ..lib import brew
from ..pipeline import ErrorPolicy

logger = logging.getLogger(__name__)


class HomebrewStep:
    step_id = "30_homebrew"
    error_policy = ErrorPolicy.WARN_AND_CONTINUE
    always_run = False

    def run(self, state: Dict[str, Any], ctx: RunContext) -> Dict[str, Any]:
        dry_run = ctx.dry_run

        brew_path = brew.find_brew()
        if brew_path is None:
            brew.install_homebrew(dry_run=dry_run)
            brew_path = brew.find_brew()
            if brew_path is None:
                if not dry_run:
                    raise BootstrapError(f"Homebrew install finished but no brew in {brew.BREW_LOCATIONS}")
                brew_path = brew.BREW_LOCATIONS[0]

        prefix = brew.apply_shellenv(brew_path)
        brew.persist_shellenv(brew_path, dry_run=dry_run)

        logger.info("Homebrew present. Updating & health check...")
        brew.update(dry_run=dry_run)
        healthy = brew.doctor(dry_run=dry_run)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["brew_prefix"] = prefix
        decisions["brew_doctor_clean"] = healthy
        return state
