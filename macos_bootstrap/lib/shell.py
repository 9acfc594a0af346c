from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

OH_MY_ZSH_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
COMPLETIONS_MARKER = "# ----- Completions & bindings -----"


def install_oh_my_zsh(home: str, *, dry_run: bool = False) -> bool:
    """Install Oh My Zsh unless the user already has a ~/.zshrc."""

    zshrc = Path(home) / ".zshrc"
    if zshrc.exists():
        logger.info("%s exists; leaving Oh My Zsh alone", zshrc)
        return False

    logger.info("Installing oh-my-zsh...")
    script = run_cmd(["curl", "-fsSL", OH_MY_ZSH_INSTALL_URL], dry_run=dry_run).stdout
    run_cmd(
        ["sh", "-c", script],
        env={"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"},
        dry_run=dry_run,
    )
    if dry_run:
        return True

    template = Path(home) / ".oh-my-zsh" / "templates" / "zshrc.zsh-template"
    if zshrc.exists():
        shutil.copy2(zshrc, zshrc.with_name(".zshrc.orig"))
    shutil.copy2(template, zshrc)
    return True


def render_completion_block(lines: Sequence[str], brew_prefix: str) -> str:
    body = [str(line).replace("{brew_prefix}", brew_prefix) for line in lines]
    return "\n".join(["", COMPLETIONS_MARKER, *body, ""])


def ensure_completion_block(
    zshrc: str,
    lines: Sequence[str],
    brew_prefix: str,
    *,
    dry_run: bool = False,
) -> bool:
    """Append the completions block once; the marker line guards re-runs."""

    p = Path(zshrc).expanduser()
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if COMPLETIONS_MARKER in existing:
        logger.info("Completion block already present in %s", p)
        return False
    if dry_run:
        logger.info("Would append completion block to %s", p)
        return True
    with p.open("a", encoding="utf-8") as fh:
        fh.write(render_completion_block(lines, brew_prefix))
    logger.info("Appended completion block to %s", p)
    return True


def install_fzf_bindings(brew_prefix: str, *, dry_run: bool = False) -> bool:
    installer = Path(brew_prefix) / "opt" / "fzf" / "install"
    r = run_cmd(
        [str(installer), "--key-bindings", "--completion", "--no-update-rc"],
        check=False,
        dry_run=dry_run,
    )
    if not r.ok:
        logger.warning("fzf key bindings/completion install failed (exit %s)", r.returncode)
    return r.ok


def ensure_default_shell(shell: str = "/bin/zsh", *, dry_run: bool = False) -> bool:
    if os.environ.get("SHELL") == shell:
        return True
    r = run_cmd(["chsh", "-s", shell], check=False, capture=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Failed to set %s as default shell.", shell)
    return r.ok
