from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    sudo: bool = False,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr unless capture=False (interactive prompts such as
      `sudo -v` need the terminal).
    - sudo=True prefixes the command with non-interactive `sudo -n`; the
      privilege session keeps the grant fresh.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    if sudo:
        argv_list = ["sudo", "-n", *argv_list]
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
        if check:
            raise CommandError(f"Command not found: {argv_list[0]}", result) from e
        return result

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
    if check and p.returncode != 0:
        raise CommandError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{stderr}", result)

    return result
