"""BackendGateway -- the single HTTP client for the Spring ``ajaxHandler``.

Every backend operation is a form-encoded POST to one endpoint, naming a
``service.method`` command.  The gateway builds that request, attaches the
current session cookie, and classifies the reply:

- no session token configured        -> :class:`~eer_mcp.errors.AuthError`
- reply carries a session-expiry mark -> :class:`~eer_mcp.errors.SessionExpiredError`
- reply body is not JSON              -> :class:`~eer_mcp.errors.TransportError`
- anything else                       -> the raw reply, unchanged

Business failures (``ajaxCallResult != "S"``) are *not* interpreted here;
that is left to each operation's normalizer.  Timeouts and connection errors
propagate as ``httpx`` exceptions.  There is no retry.

Typical usage::

    gateway = BackendGateway(config, session)
    raw = await gateway.send("ticketUIService.selectList", {"page": 1, "rows": 20})
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from eer_mcp.config import AdapterConfig
from eer_mcp.errors import AuthError, SessionExpiredError, TransportError
from eer_mcp.session import SessionState

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "X-Requested-With": "XMLHttpRequest",
}

# Reply signatures that mean the JSESSIONID is no longer accepted.
NO_SESSION_ERROR_CODE = "NO_SESSION"
SESSION_INVALID_RESULT = "N_SESSION"
FAILURE_RESULT = "N"
SESSION_INVALID_MESSAGE = "Login session is invalid."


class BackendGateway:
    """Sends commands to the backend on behalf of the operation catalog.

    Each call opens its own ``httpx.AsyncClient``, so a slow backend only
    holds up the tool call that is waiting on it.

    Parameters
    ----------
    config:
        Supplies the endpoint URL, the domain identifier and the timeout.
    session:
        The shared session cell.  Read at send time, never cached.
    transport:
        Optional ``httpx`` transport.  Tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: AdapterConfig,
        session: SessionState,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._transport = transport

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def domain_id(self) -> str:
        return self._config.domain_id

    async def send(self, command: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Post *command* with *params* and return the decoded reply.

        Raises
        ------
        AuthError
            If no session token is configured.
        SessionExpiredError
            If the backend rejects the session.
        TransportError
            If the reply body is not JSON or not valid UTF-8.
        httpx.HTTPError
            On timeouts, connection failures and non-2xx statuses.
        """
        cookie = self._session.cookie()
        if cookie is None:
            raise AuthError()

        logger.info("Backend request: %s", command)

        async with httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=DEFAULT_HEADERS,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(
                self._config.ajax_path,
                data=build_form(command, self._config.domain_id, params or {}),
                headers={"Cookie": cookie},
            )
        response.raise_for_status()

        # ValueError covers both malformed JSON and bodies that are not UTF-8.
        try:
            reply = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Backend returned a non-JSON reply for {command} "
                f"(HTTP {response.status_code})."
            ) from exc

        if is_session_expired(reply):
            logger.warning("Backend reported an expired session for %s", command)
            raise SessionExpiredError()

        return reply


def build_form(command: str, domain_id: str, params: Mapping[str, Any]) -> dict[str, str]:
    """Flatten a command and its parameters into form fields.

    ``None`` values are omitted rather than sent empty.  Booleans are sent as
    ``"true"``/``"false"``.
    """
    form = {"command": command, "domainId": domain_id}
    for key, value in params.items():
        if value is None:
            continue
        form[key] = form_value(value)
    return form


def form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_session_expired(reply: Any) -> bool:
    """Return True when *reply* carries one of the session-expiry signatures."""
    if not isinstance(reply, Mapping):
        return False
    return (
        reply.get("ajaxCallErrorCode") == NO_SESSION_ERROR_CODE
        or reply.get("ajaxCallResult") == SESSION_INVALID_RESULT
        or (
            reply.get("ajaxCallResult") == FAILURE_RESULT
            and reply.get("ajaxCallMessage") == SESSION_INVALID_MESSAGE
        )
    )
