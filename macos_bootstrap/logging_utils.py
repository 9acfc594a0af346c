from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = str(Path.home() / "Library" / "Logs" / "macos-bootstrap.log")

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_log_file(log_path: str) -> tuple[logging.Handler, str]:
    # ~/Library/Logs is missing on a freshly created account.
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / "macos-bootstrap.log")
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    console_level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send the full run transcript to ``log_path`` and a summary to the console.

    The file always receives DEBUG records, which include the captured
    STDOUT/STDERR of every command. The console shows ``console_level`` and
    above; ``--verbose`` lowers it to DEBUG. An unwritable ``log_path`` falls
    back to ``./macos-bootstrap.log``.

    Calling it again only adjusts the console level. Returns the file path in use.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console: Optional[logging.Handler] = getattr(root, "_macos_bootstrap_console", None)
    if getattr(root, "_macos_bootstrap_configured", False):
        if console is not None:
            console.setLevel(console_level)
        return getattr(root, "_macos_bootstrap_log_path", log_path)

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    file_handler, chosen_path = _open_log_file(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(fmt)
        root.addHandler(console)

    setattr(root, "_macos_bootstrap_configured", True)
    setattr(root, "_macos_bootstrap_log_path", chosen_path)
    setattr(root, "_macos_bootstrap_console", console)

    logging.getLogger(__name__).info("Logging to %s (requested %s)", chosen_path, log_path)
    return chosen_path
