from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path).expanduser()
    if not p.exists():
        return {}

    fmt = _detect_format(p)
    data: Any
    if fmt in {"yaml", "yml"}:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)

    fmt = _detect_format(p)
    if fmt in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", "1.0")
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("dry_run", False)
    # Seconds between `sudo -n true` renewals.
    cfg.setdefault("keepalive_interval", 60)
    # Command Line Tools install: ceiling and poll interval, in seconds.
    cfg.setdefault("clt_timeout", 900)
    cfg.setdefault("clt_poll_interval", 5)
    # None means prompt interactively.
    cfg.setdefault("git_name", None)
    cfg.setdefault("git_email", None)
    cfg.setdefault("git_editor", None)
    cfg.setdefault("ssh_key_path", "~/.ssh/id_ed25519")
    cfg.setdefault("install_oh_my_zsh", True)
    cfg.setdefault("default_shell", "/bin/zsh")
    cfg.setdefault("screenshots_dir", "~/Desktop/Screenshots")
    cfg.setdefault("workspace_dirs", ["~/development"])
    # if_passwordless | always | never
    cfg.setdefault("software_update", "if_passwordless")

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("warnings", [])
    exe.setdefault("errors", [])

    return state


def merge_config(state: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay user config (e.g. from --config) onto state['config']."""

    state.setdefault("config", {}).update(overrides)
    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def record_warning(state: Dict[str, Any], **entry: Any) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append(entry)
