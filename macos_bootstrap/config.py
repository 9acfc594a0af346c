from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def load_user_config(path: str) -> Dict[str, Any]:
    """Load a YAML config file whose keys overlay state['config']."""

    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("bootstrap config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return raw
