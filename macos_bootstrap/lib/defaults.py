from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreferenceEdit:
    domain: str
    key: str
    value: Any
    current_host: bool = False
    # System-level domains (e.g. /Library/Preferences/...) need root.
    sudo: bool = False


@dataclass
class PreferenceReport:
    written: List[str] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)
    restarted: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def value_args(value: Any) -> List[str]:
    """Encode a typed value as `defaults write` arguments."""

    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return ["-bool", "true" if value else "false"]
    if isinstance(value, int):
        return ["-int", str(value)]
    if isinstance(value, float):
        return ["-float", repr(value)]
    if isinstance(value, str):
        return ["-string", value]
    if isinstance(value, dict):
        args = ["-dict"]
        for k, v in value.items():
            if isinstance(v, dict):
                raise TypeError(f"Nested dict values are not supported (key {k!r})")
            args += [str(k), *value_args(v)]
        return args
    raise TypeError(f"Unsupported preference value type: {type(value).__name__}")


def write_argv(edit: PreferenceEdit) -> List[str]:
    argv = ["defaults"]
    if edit.current_host:
        argv.append("-currentHost")
    return [*argv, "write", edit.domain, edit.key, *value_args(edit.value)]


def _expand(value: Any, home: str) -> Any:
    if isinstance(value, str):
        return value.replace("{home}", home)
    if isinstance(value, dict):
        return {k: _expand(v, home) for k, v in value.items()}
    return value


def edits_from_manifest(
    manifest: Mapping[str, Any],
    *,
    home: Optional[str] = None,
) -> Tuple[List[PreferenceEdit], Dict[str, str]]:
    """Read manifests/defaults.yaml.

    Returns the ordered edits and the domain -> process restart map. String
    values may use a ``{home}`` placeholder.
    """

    home = home or str(Path.home())
    restarts = {str(k): str(v) for k, v in (manifest.get("restart") or {}).items()}

    edits: List[PreferenceEdit] = []
    blocks = manifest.get("domains") or []
    if not isinstance(blocks, list):
        raise ValueError("defaults manifest: domains must be a list")
    for block in blocks:
        domain = str(block.get("domain") or "").strip()
        if not domain:
            raise ValueError(f"defaults manifest: block without domain: {block!r}")
        settings = block.get("settings") or {}
        if not isinstance(settings, dict):
            raise ValueError(f"defaults manifest: settings for {domain} must be a mapping")
        for key, value in settings.items():
            edits.append(
                PreferenceEdit(
                    domain=domain,
                    key=str(key),
                    value=_expand(value, home),
                    current_host=bool(block.get("current_host", False)),
                    sudo=bool(block.get("sudo", False)),
                )
            )
    return edits, restarts


def apply_preferences(
    edits: Sequence[PreferenceEdit],
    restarts: Optional[Mapping[str, str]] = None,
    *,
    dry_run: bool = False,
) -> PreferenceReport:
    """Write every edit, then restart each affected process once."""

    report = PreferenceReport()
    touched: List[str] = []

    for edit in edits:
        label = f"{edit.domain} {edit.key}"
        try:
            argv = write_argv(edit)
        except TypeError as e:
            logger.warning("Skipping %s: %s", label, e)
            report.failed.append({"domain": edit.domain, "key": edit.key, "error": str(e)})
            continue
        r = run_cmd(argv, check=False, sudo=edit.sudo, dry_run=dry_run)
        if not r.ok:
            logger.warning("defaults write failed for %s (exit %s)", label, r.returncode)
            report.failed.append({"domain": edit.domain, "key": edit.key, "error": r.stderr.strip()})
            continue
        report.written.append(label)
        if edit.domain not in touched:
            touched.append(edit.domain)

    for domain in touched:
        process = (restarts or {}).get(domain)
        if not process or process in report.restarted:
            continue
        report.restarted.append(process)
        if not run_cmd(["killall", process], check=False, dry_run=dry_run).ok:
            logger.warning("Could not restart %s (not running?)", process)

    logger.info(
        "Preferences: %d written, %d failed, restarted %s",
        len(report.written),
        len(report.failed),
        ",".join(report.restarted) or "nothing",
    )
    return report
