from __future__ import annotations

import enum
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Apple Silicon first, then Intel.
BREW_LOCATIONS = ("/opt/homebrew/bin/brew", "/usr/local/bin/brew")

BREW_ENV = {
    "HOMEBREW_NO_ANALYTICS": "1",
    "HOMEBREW_CASK_OPTS": "--appdir=/Applications",
}

_ALREADY_INSTALLED_MARKERS = ("already installed", "already an app at")


class PackageKind(str, enum.Enum):
    FORMULA = "formula"
    CASK = "cask"
    FONT = "font"


@dataclass(frozen=True)
class PackageSpec:
    identifier: str
    kind: PackageKind = PackageKind.FORMULA

    @property
    def is_cask(self) -> bool:
        # Fonts ship as casks from homebrew/cask since the fonts tap was retired.
        return self.kind in {PackageKind.CASK, PackageKind.FONT}


@dataclass
class ApplyReport:
    installed: List[str] = field(default_factory=list)
    upgraded: List[str] = field(default_factory=list)
    failed: List[Dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


_MANIFEST_SECTIONS = (
    ("formulae", PackageKind.FORMULA),
    ("casks", PackageKind.CASK),
    ("fonts", PackageKind.FONT),
)


def specs_from_manifest(manifest: Dict[str, Any]) -> List[PackageSpec]:
    """Flatten manifests/packages.yaml into an ordered PackageSpec list.

    Sections may be a flat list or a mapping of group name -> list.
    """

    specs: List[PackageSpec] = []
    seen: set[tuple[str, PackageKind]] = set()
    for section, kind in _MANIFEST_SECTIONS:
        raw = manifest.get(section) or []
        if isinstance(raw, dict):
            groups: Iterable[Any] = raw.values()
        elif isinstance(raw, list):
            groups = [raw]
        else:
            raise ValueError(f"packages manifest: {section} must be a list or mapping of lists")
        for group in groups:
            if not isinstance(group, list):
                raise ValueError(f"packages manifest: {section} groups must be lists")
            for item in group:
                ident = str(item).strip()
                if not ident or (ident, kind) in seen:
                    continue
                seen.add((ident, kind))
                specs.append(PackageSpec(identifier=ident, kind=kind))
    return specs


def find_brew() -> Optional[str]:
    found = shutil.which("brew")
    if found:
        return found
    for candidate in BREW_LOCATIONS:
        if Path(candidate).exists():
            return candidate
    return None


def brew(argv: Sequence[str], *, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(["brew", *argv], check=check, env=BREW_ENV, dry_run=dry_run)


def install_homebrew(*, dry_run: bool = False) -> None:
    logger.warning("Installing Homebrew...")
    script = run_cmd(["curl", "-fsSL", INSTALL_SCRIPT_URL], dry_run=dry_run).stdout
    # The installer asks for confirmation on a TTY; the sudo grant is already held.
    run_cmd(["/bin/bash", "-c", script], capture=False, env={"NONINTERACTIVE": "1"}, dry_run=dry_run)


def apply_shellenv(brew_path: str) -> str:
    """Expose brew to this process, like `eval "$(brew shellenv)"`. Returns the prefix."""

    # Not resolved: Intel brew is a symlink into /usr/local/Homebrew.
    prefix = str(Path(brew_path).parent.parent)
    path = os.environ.get("PATH", "")
    entries = [f"{prefix}/bin", f"{prefix}/sbin"]
    rest = [p for p in path.split(os.pathsep) if p and p not in entries]
    os.environ["PATH"] = os.pathsep.join(entries + rest)
    os.environ["HOMEBREW_PREFIX"] = prefix
    return prefix


def persist_shellenv(brew_path: str, profile: str = "~/.zprofile", *, dry_run: bool = False) -> bool:
    """Append the shellenv line to the login profile once. Returns True if written."""

    p = Path(profile).expanduser()
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if "brew shellenv" in existing:
        return False
    line = f'eval "$({brew_path} shellenv)"\n'
    if dry_run:
        logger.info("Would append shellenv to %s", p)
        return True
    with p.open("a", encoding="utf-8") as fh:
        if existing and not existing.endswith("\n"):
            fh.write("\n")
        fh.write(line)
    logger.info("Persisted brew shellenv to %s", p)
    return True


def update(*, dry_run: bool = False) -> None:
    brew(["update"], dry_run=dry_run)


def doctor(*, dry_run: bool = False) -> bool:
    """Advisory health check; notes never fail the run."""

    r = brew(["doctor"], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("brew doctor reported notes.")
    return r.ok


def _already_installed(r: CmdResult) -> bool:
    text = f"{r.stdout}\n{r.stderr}".lower()
    return any(m in text for m in _ALREADY_INSTALLED_MARKERS)


def apply_package(spec: PackageSpec, report: ApplyReport, *, dry_run: bool = False) -> None:
    """Install then upgrade one package; failures are recorded, never raised."""

    cask = ["--cask"] if spec.is_cask else []

    r = brew(["install", *cask, spec.identifier], check=False, dry_run=dry_run)
    if not r.ok and not _already_installed(r):
        logger.warning("Install failed for %s %s (exit %s)", spec.kind.value, spec.identifier, r.returncode)
        report.failed.append({"package": spec.identifier, "kind": spec.kind.value, "action": "install"})
        return
    report.installed.append(spec.identifier)

    r = brew(["upgrade", *cask, spec.identifier], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Upgrade failed for %s %s (exit %s)", spec.kind.value, spec.identifier, r.returncode)
        report.failed.append({"package": spec.identifier, "kind": spec.kind.value, "action": "upgrade"})
        return
    report.upgraded.append(spec.identifier)


def apply_packages(specs: Sequence[PackageSpec], *, dry_run: bool = False) -> ApplyReport:
    report = ApplyReport()
    for spec in specs:
        apply_package(spec, report, dry_run=dry_run)

    logger.info("Cleaning up brew cache...")
    if not brew(["cleanup", "-s"], check=False, dry_run=dry_run).ok:
        logger.warning("brew cleanup failed (ignored)")

    logger.info(
        "Packages: %d installed, %d upgraded, %d failed",
        len(report.installed),
        len(report.upgraded),
        len(report.failed),
    )
    return report


def ensure_on_path(*, dry_run: bool = False) -> str:
    """Locate brew and expose it to this process. Returns the brew prefix."""

    brew_path = find_brew()
    if brew_path is None:
        if dry_run:
            return os.environ.get("HOMEBREW_PREFIX", "/opt/homebrew")
        raise FileNotFoundError("Homebrew is not installed (brew not found)")
    return apply_shellenv(brew_path)
