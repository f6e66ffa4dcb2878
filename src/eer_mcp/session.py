"""Process-wide session token holder.

:class:`SessionState` is the single mutable cell holding the ``JSESSIONID``
used for backend calls.  One instance is created by the server and handed to
the :class:`~eer_mcp.gateway.BackendGateway`, which reads the *current* token
on every request.  Updates are last-write-wins; a lock keeps reads and writes
of the value consistent across transport threads.

Typical usage::

    session = SessionState(token=config.session_id, env_file=config.env_file)
    session.is_active            # False when no token is configured
    outcome = session.update("1kymf8yzu71xdb0cbxpzuffxb", persist=True)
    outcome.persisted            # True when the .env line was written
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import set_key

from eer_mcp.config import SESSION_KEY, mask_token
from eer_mcp.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUpdate:
    """Outcome of :meth:`SessionState.update`."""

    token: str
    persist_requested: bool
    persisted: bool = False
    env_file: Optional[str] = None
    persist_error: Optional[str] = None


class SessionState:
    """Holds the active session token.

    The state is either *unconfigured* (no token) or *active*.  Once active it
    can only move to another active token.

    Parameters
    ----------
    token:
        Initial token.  Blank values leave the state unconfigured.
    env_file:
        Settings file used by :meth:`update` when persistence is requested.
    """

    def __init__(self, token: Optional[str] = None, env_file: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._token = (token or "").strip() or None
        self._env_file = env_file

    @property
    def token(self) -> Optional[str]:
        """The active token, or *None* while unconfigured."""
        with self._lock:
            return self._token

    @property
    def is_active(self) -> bool:
        return self.token is not None

    @property
    def env_file(self) -> Optional[str]:
        return self._env_file

    def cookie(self) -> Optional[str]:
        """Return the ``Cookie`` header value for the active token."""
        token = self.token
        return f"JSESSIONID={token}" if token else None

    def update(self, token: str, persist: bool = True) -> SessionUpdate:
        """Make *token* the active session token.

        The in-memory switch always happens once *token* passes validation.
        Persistence to the settings file is attempted afterwards; its failure
        is reported in the returned :class:`SessionUpdate`, never raised.

        Raises
        ------
        ValidationError
            If *token* is empty or whitespace only.
        """
        trimmed = (token or "").strip()
        if not trimmed:
            raise ValidationError("sessionId", "a non-empty session ID is required")

        with self._lock:
            self._token = trimmed
        logger.info("Session ID updated: %s", mask_token(trimmed))

        if not persist:
            return SessionUpdate(token=trimmed, persist_requested=False)

        if self._env_file is None:
            return SessionUpdate(
                token=trimmed,
                persist_requested=True,
                persist_error="no settings file configured",
            )

        try:
            persist_token(self._env_file, trimmed)
        except OSError as exc:
            logger.warning("Could not save session ID to %s: %s", self._env_file, exc)
            return SessionUpdate(
                token=trimmed,
                persist_requested=True,
                env_file=self._env_file,
                persist_error=str(exc),
            )

        return SessionUpdate(
            token=trimmed,
            persist_requested=True,
            persisted=True,
            env_file=self._env_file,
        )


def persist_token(env_file: str, token: str) -> Path:
    """Write ``SESSION_ID=<token>`` into *env_file*.

    The existing ``SESSION_ID`` line is replaced in place; when there is none a
    new line is appended.  All other lines are left untouched.  The file is
    created if it does not exist, but its directory must.
    """
    path = Path(env_file)
    if not path.parent.is_dir():
        raise FileNotFoundError(f"Directory does not exist: {path.parent}")
    set_key(str(path), SESSION_KEY, token, quote_mode="never")
    logger.info("Saved session ID to %s", path)
    return path
