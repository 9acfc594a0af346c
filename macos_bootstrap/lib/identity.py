from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..errors import ValidationError
from .command import run_cmd

logger = logging.getLogger(__name__)

GITHUB_KEYS_URL = "https://github.com/settings/keys"

SSH_HOST_BLOCK = """Host github.com
  HostName github.com
  User git
  IdentityFile {identity_file}
  IdentitiesOnly yes
"""

_HOST_RE = re.compile(r"^Host\s+github\.com\b", re.MULTILINE)


@dataclass(frozen=True)
class GitIdentity:
    name: str
    email: str


def validate_identity(name: Optional[str], email: Optional[str]) -> GitIdentity:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email:
        raise ValidationError("Git name/email must not be empty")
    return GitIdentity(name=name, email=email)


def resolve_identity(
    name: Optional[str],
    email: Optional[str],
    prompt: Callable[[str], str],
) -> GitIdentity:
    """Use configured values, prompting for whichever is missing."""

    if not name:
        name = prompt("##### Enter your Git full name: ")
    if not email:
        email = prompt("##### Enter your Git email: ")
    return validate_identity(name, email)


def git_settings(identity: GitIdentity, *, editor: str, gpg_program: str) -> List[Tuple[str, str, bool]]:
    """(key, value, required) for `git config --global`."""

    return [
        ("user.name", identity.name, True),
        ("user.email", identity.email, True),
        ("color.ui", "auto", True),
        ("push.default", "current", True),
        ("core.editor", editor, True),
        ("credential.helper", "osxkeychain", False),
        ("init.defaultBranch", "main", True),
        ("gpg.program", gpg_program, False),
        ("commit.gpgsign", "false", False),
    ]


def default_editor() -> str:
    return os.environ.get("VISUAL") or os.environ.get("EDITOR") or "nano"


def configure_git(
    identity: GitIdentity,
    *,
    editor: Optional[str] = None,
    brew_prefix: str = "/opt/homebrew",
    dry_run: bool = False,
) -> None:
    for key, value, required in git_settings(
        identity,
        editor=editor or default_editor(),
        gpg_program=f"{brew_prefix}/bin/gpg",
    ):
        r = run_cmd(["git", "config", "--global", key, value], check=required, dry_run=dry_run)
        if not r.ok:
            logger.warning("git config %s failed (ignored)", key)


def ensure_ssh_key(key_path: str, email: str, *, dry_run: bool = False) -> bool:
    """Generate an ed25519 key unless one exists. Returns True if generated."""

    key = Path(key_path).expanduser()
    if key.exists():
        logger.info("SSH key %s already exists", key)
        return False

    if not dry_run:
        key.parent.mkdir(parents=True, exist_ok=True)
        key.parent.chmod(0o700)

    logger.info("Generating ed25519 SSH key...")
    run_cmd(["ssh-keygen", "-t", "ed25519", "-C", email, "-f", str(key), "-N", ""], dry_run=dry_run)

    # Keychain-backed agent first, plain agent otherwise.
    if not run_cmd(["ssh-add", "--apple-use-keychain", str(key)], check=False, dry_run=dry_run).ok:
        if not run_cmd(["ssh-add", str(key)], check=False, dry_run=dry_run).ok:
            logger.warning("Could not add %s to the ssh agent", key)

    if dry_run:
        return True

    pub = key.with_name(key.name + ".pub").read_text(encoding="utf-8")
    if run_cmd(["pbcopy"], check=False, input_text=pub).ok:
        logger.info("SSH public key copied to clipboard. Add it to GitHub: %s", GITHUB_KEYS_URL)
    logger.info("Public key: %s", pub.strip())
    return True


def ensure_ssh_config(config_path: str, key_path: str, *, dry_run: bool = False) -> bool:
    """Append a github.com Host block unless one is already configured."""

    p = Path(config_path).expanduser()
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if _HOST_RE.search(existing):
        return False
    if dry_run:
        logger.info("Would add github.com host block to %s", p)
        return True

    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as fh:
        if existing and not existing.endswith("\n"):
            fh.write("\n")
        fh.write(SSH_HOST_BLOCK.format(identity_file=key_path))
    p.chmod(0o600)
    logger.info("Added github.com host block to %s", p)
    return True
