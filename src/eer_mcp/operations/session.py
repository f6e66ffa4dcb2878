"""Session token update (``update_session_id``).

Unlike the other catalog entries this operation never reaches the backend: it
switches the in-memory token and optionally writes it to the settings file.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from eer_mcp.errors import AdapterError
from eer_mcp.models.requests import SessionUpdateInput
from eer_mcp.operations.base import validate_input
from eer_mcp.session import SessionState, SessionUpdate

logger = logging.getLogger(__name__)

NAME = "update_session_id"
DESCRIPTION = (
    "Update the session ID. The new JSESSIONID takes effect immediately for every "
    "following tool call and is saved to the .env file unless saveToFile is false."
)


def update_session(session: SessionState, arguments: Mapping[str, Any]) -> Union[dict, str]:
    """Validate *arguments* and apply the new token to *session*.

    Returns
    -------
    str
        A status report naming the token, the immediate switch and the
        persistence outcome.
    dict
        An error payload when the input is invalid.
    """
    try:
        request = validate_input(SessionUpdateInput, arguments)
        outcome = session.update(request.session_id, persist=request.save_to_file)
    except AdapterError as exc:
        logger.warning("%s failed: %s: %s", NAME, exc.error_type, exc.message)
        return exc.to_result()
    return describe_update(outcome)


def describe_update(outcome: SessionUpdate) -> str:
    """Render a :class:`SessionUpdate` as operator-facing text."""
    lines = [
        "Session ID updated.",
        "",
        f"- New session ID: {outcome.token}",
        "- Applied immediately: yes (the next backend call uses the new session ID)",
    ]
    if not outcome.persist_requested:
        lines.append("- Saved to .env: skipped (a restart restores the previous session ID)")
    elif outcome.persisted:
        lines.append(f"- Saved to .env: done ({outcome.env_file}, kept across restarts)")
    else:
        lines.append(f"- Saved to .env: failed ({outcome.persist_error})")
    lines.append("")
    lines.append("Ticket and KB tools can be used now.")
    return "\n".join(lines)
