from __future__ import annotations

import enum
import logging
import threading
from typing import Optional

from ..errors import AuthError
from .command import run_cmd

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


class PrivilegeSession:
    """A sudo grant obtained once and renewed in the background.

    The renewal thread is the only writer of ``state``. It stops when the
    cancellation token is set (``stop()``, or leaving the ``with`` block) and
    is a daemon thread, so an interpreter that dies abnormally takes it down too.
    """

    def __init__(self, *, interval: float = 60.0, dry_run: bool = False) -> None:
        self.interval = float(interval)
        self.dry_run = dry_run
        self.state = SessionState.UNAUTHENTICATED
        self.renewals = 0
        self._cancel = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def acquire(cls, *, interval: float = 60.0, dry_run: bool = False) -> "PrivilegeSession":
        session = cls(interval=interval, dry_run=dry_run)
        session.authenticate()
        return session

    @property
    def cancel_token(self) -> threading.Event:
        return self._cancel

    @property
    def renewing(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def authenticate(self) -> None:
        """Interactive credential check; blocks until the user answers."""

        r = run_cmd(["sudo", "-v"], check=False, capture=False, dry_run=self.dry_run)
        if not r.ok:
            raise AuthError("Sudo required to apply system-wide settings (sudo -v failed or was declined)")
        self.state = SessionState.AUTHENTICATED
        logger.info("Privilege session acquired")

    def start_keepalive(self) -> None:
        if self.state is not SessionState.AUTHENTICATED:
            raise AuthError("Cannot keep alive a session that was never authenticated")
        if self.renewing:
            return
        self._thread = threading.Thread(target=self._renew_loop, name="sudo-keepalive", daemon=True)
        self._thread.start()
        logger.info("Sudo keepalive started (every %ss)", self.interval)

    def _renew_loop(self) -> None:
        # Event.wait returns True once the token is set.
        while not self._cancel.wait(self.interval):
            r = run_cmd(["sudo", "-n", "true"], check=False, dry_run=self.dry_run)
            self.renewals += 1
            if r.ok:
                self.state = SessionState.AUTHENTICATED
            else:
                if self.state is not SessionState.EXPIRED:
                    logger.warning("Sudo grant could not be renewed; privileged steps may prompt or fail")
                self.state = SessionState.EXPIRED

    def stop(self, timeout: Optional[float] = None) -> None:
        self._cancel.set()
        if self._thread is not None:
            self._thread.join(timeout if timeout is not None else self.interval + 1.0)
            logger.info("Sudo keepalive stopped after %d renewal(s)", self.renewals)
            self._thread = None

    def __enter__(self) -> "PrivilegeSession":
        self.start_keepalive()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()


def has_passwordless_sudo(*, dry_run: bool = False) -> bool:
    """True when sudo works without prompting (cached grant or NOPASSWD)."""

    return run_cmd(["sudo", "-n", "true"], check=False, dry_run=dry_run).ok
