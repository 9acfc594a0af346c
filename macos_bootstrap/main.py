from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import load_user_config
from .context import RunContext
from .errors import FatalError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .state_store import ensure_defaults, load_state, merge_config, save_state
from .steps import (
    AcquirePrivilegesStep,
    ApplyPreferencesStep,
    CommandLineToolsStep,
    ConfigureIdentityStep,
    ConfigureShellStep,
    EditorExtensionsStep,
    FinalizeStep,
    HomebrewStep,
    InstallPackagesStep,
    SystemSettingsStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = str(Path.home() / ".local" / "state" / "macos-bootstrap" / "state.json")


def build_steps():
    return [
        AcquirePrivilegesStep(),
        CommandLineToolsStep(),
        HomebrewStep(),
        InstallPackagesStep(),
        ConfigureShellStep(),
        ConfigureIdentityStep(),
        EditorExtensionsStep(),
        ApplyPreferencesStep(),
        SystemSettingsStep(),
        FinalizeStep(),
    ]


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    config_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: Optional[bool] = None,
    verbose: bool = False,
    prompt: Callable[[str], str] = input,
    steps=None,
) -> Dict[str, Any]:
    """Run the bootstrap pipeline, persisting state for resume."""

    actual_log_path = configure_logging(log_path=log_path, console_level=logging.DEBUG if verbose else logging.INFO)

    state = load_state(state_path)
    if config_path:
        merge_config(state, load_user_config(config_path))
    if dry_run is not None:
        merge_config(state, {"dry_run": dry_run})
    state = ensure_defaults(state)
    state.setdefault("execution", {}).setdefault("paths", {})["log_path_requested"] = log_path
    state.setdefault("execution", {}).setdefault("paths", {})["log_path_actual"] = actual_log_path

    ctx = RunContext(dry_run=bool(state["config"].get("dry_run", False)), prompt=prompt)

    try:
        with ctx.resources:
            result = run_pipeline(
                state=state,
                steps=steps if steps is not None else build_steps(),
                ctx=ctx,
                start_at=start_at,
                stop_after=stop_after,
                force=force,
            )
        state = result.state
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        summary["warned_steps"] = result.warned_steps
        return state
    except FatalError as e:
        logger.error("Bootstrap aborted: %s", e)
        _record_error(state, e)
        raise
    except Exception as e:
        logger.exception("Bootstrap failed")
        _record_error(state, e)
        raise
    finally:
        save_state(state_path, state)


def _record_error(state: Dict[str, Any], e: Exception) -> None:
    state.setdefault("execution", {}).setdefault("errors", []).append(
        {
            "step": (state.get("execution") or {}).get("current_step"),
            "error": str(e),
            "type": type(e).__name__,
        }
    )


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="macos-bootstrap")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to bootstrap state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to bootstrap log")
    p.add_argument("--config", default=None, help="YAML file overlaid on state config")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_install_packages)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", default=None, help="Log commands without running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Echo command output to the console as well as the log")

    args = p.parse_args(argv)

    try:
        run(
            state_path=args.state,
            log_path=args.log,
            config_path=args.config,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
            dry_run=args.dry_run,
            verbose=args.verbose,
        )
    except FatalError as e:
        return e.exit_code
    except Exception:
        # Already logged with traceback and recorded in state by run().
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
