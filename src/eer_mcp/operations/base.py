"""Operation -- one catalog entry pairing an input contract with a backend command.

An :class:`Operation` runs the fixed pipeline every tool shares:

1. validate the caller's arguments against ``input_model``;
2. build the backend parameters with ``build_params``;
3. send the command through the :class:`~eer_mcp.gateway.BackendGateway`;
4. check the reply with the operation's ``succeeded`` policy;
5. project the reply into a summary with ``normalize``.

Any failure along the way is returned as a structured error payload (see
:meth:`eer_mcp.errors.AdapterError.to_result`); :meth:`Operation.invoke`
never raises for expected failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

import httpx
import pydantic

from eer_mcp.errors import AdapterError, BackendError, TransportError, ValidationError
from eer_mcp.gateway import BackendGateway
from eer_mcp.models.requests import OperationInput
from eer_mcp.models.summaries import Summary

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Unknown error"

SuccessPolicy = Callable[[Mapping[str, Any]], bool]
Normalizer = Callable[[Mapping[str, Any], Any], Union[Summary, str]]
ParamsBuilder = Callable[[Any], dict]


# ---------------------------------------------------------------------------
# Success policies
# ---------------------------------------------------------------------------


def ajax_call_succeeded(reply: Mapping[str, Any]) -> bool:
    """Success when ``ajaxCallResult`` is ``"S"``."""
    return reply.get("ajaxCallResult") == "S"


def ajax_or_process_succeeded(reply: Mapping[str, Any]) -> bool:
    """Success when either ``ajaxCallResult`` or ``processResult`` is ``"S"``."""
    return reply.get("ajaxCallResult") == "S" or reply.get("processResult") == "S"


# ---------------------------------------------------------------------------
# Operation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Operation:
    """A named, independently invocable backend operation."""

    name: str
    command: str
    description: str
    input_model: type[OperationInput]
    build_params: ParamsBuilder
    normalize: Normalizer
    succeeded: SuccessPolicy = ajax_call_succeeded
    failure_message: str = DEFAULT_FAILURE_MESSAGE

    async def invoke(self, gateway: BackendGateway, arguments: Mapping[str, Any]) -> Union[dict, str]:
        """Run the operation and return a summary dict, a text result, or an error payload."""
        try:
            request = validate_input(self.input_model, arguments)
            reply = await gateway.send(self.command, self.build_params(request))
            result = self.interpret(reply, request)
        except AdapterError as exc:
            logger.warning("%s failed: %s: %s", self.name, exc.error_type, exc.message)
            return exc.to_result()
        except httpx.HTTPError as exc:
            logger.warning("%s failed: transport error: %s", self.name, exc)
            return TransportError(f"Backend request failed: {exc}").to_result()

        if isinstance(result, Summary):
            return result.to_output()
        return result

    def interpret(self, reply: Any, request: OperationInput) -> Union[Summary, str]:
        """Apply the success policy and normalizer to a raw reply.

        Raises
        ------
        BackendError
            If the reply is not a mapping, reports a failure, or cannot be
            projected onto the summary model.
        NotFoundError
            Raised by the normalizer when the payload container is missing.
        """
        if not isinstance(reply, Mapping):
            raise BackendError(f"Unexpected reply type from {self.command}: {type(reply).__name__}")
        if not self.succeeded(reply):
            raise BackendError(failure_message(reply, self.failure_message))
        try:
            return self.normalize(reply, request)
        except pydantic.ValidationError as exc:
            raise BackendError(
                f"Unexpected reply shape from {self.command}: {exc.error_count()} invalid field(s)"
            ) from exc


# ---------------------------------------------------------------------------
# Helpers shared by normalizers
# ---------------------------------------------------------------------------


def validate_input(model: type[OperationInput], arguments: Mapping[str, Any]) -> OperationInput:
    """Validate *arguments* against *model*, translating pydantic errors.

    Raises
    ------
    ValidationError
        Naming the first offending field as the caller spelled it.
    """
    try:
        return model.model_validate(dict(arguments))
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        raise ValidationError(field, first.get("msg", "invalid value"), _expected(model, field)) from exc


def _expected(model: type[OperationInput], field: str) -> Optional[str]:
    for name, info in model.model_fields.items():
        if field in (name, info.alias):
            return info.description
    return None


def failure_message(reply: Mapping[str, Any], fallback: str) -> str:
    """Pick the backend's message, then its error code, then *fallback*."""
    for key in ("ajaxCallMessage", "ajaxCallErrorCode"):
        value = reply.get(key)
        if value not in (None, ""):
            return str(value)
    return fallback


def as_mapping(value: Any) -> Mapping[str, Any]:
    """Return *value* if it is a mapping, else an empty dict."""
    return value if isinstance(value, Mapping) else {}


def list_field(reply: Mapping[str, Any], key: str) -> Optional[list]:
    """Return ``reply[key]`` if it is a list, else *None*."""
    value = reply.get(key)
    return value if isinstance(value, list) else None


def count(value: Any) -> int:
    """Length of *value* when it is a list, 0 otherwise."""
    return len(value) if isinstance(value, list) else 0


def first_present(*values: Any) -> Any:
    """Return the first value that is not *None*."""
    for value in values:
        if value is not None:
            return value
    return None


def first_truthy(*values: Any) -> Any:
    """Return the first truthy value, else the last value given."""
    for value in values:
        if value:
            return value
    return values[-1] if values else None
