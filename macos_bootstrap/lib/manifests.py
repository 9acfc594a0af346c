from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def _manifests_root() -> Path:
    # macos_bootstrap/lib/manifests.py -> macos_bootstrap/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_manifest(name: str, *, manifests_dir: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML manifest (packages, defaults, editor, shell) by name.

    manifests_dir overrides the manifests shipped with the package.
    """

    root = Path(manifests_dir).expanduser() if manifests_dir else _manifests_root()
    p = root / f"{name}.yaml"
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data
