"""Shared fixtures: a clean settings environment and a scripted fake backend.

The fake backend is a real ``httpx.MockTransport`` plugged into the real
gateway, so requests go through httpx's form encoding exactly as in
production.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from eer_mcp.config import AdapterConfig
from eer_mcp.gateway import BackendGateway
from eer_mcp.session import SessionState

SETTINGS_KEYS = (
    "SPRING_BASE_URL",
    "SPRING_AJAX_PATH",
    "SPRING_DOMAIN_ID",
    "SESSION_ID",
    "HOST",
    "PORT",
)

TOKEN = "1kymf8yzu71xdb0cbxpzuffxb"


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Remove settings variables and run each test from an empty directory."""
    for key in list(os.environ):
        if key in SETTINGS_KEYS or key.startswith("EER_MCP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


class FakeBackend:
    """Scripted replies for the gateway, recording every request."""

    def __init__(self) -> None:
        self.replies: list[tuple[Any, int]] = []
        self.requests: list[httpx.Request] = []
        self.error: Optional[Exception] = None

    def reply(self, payload: Any, status: int = 200) -> "FakeBackend":
        self.replies.append((payload, status))
        return self

    def fail_with(self, error: Exception) -> "FakeBackend":
        self.error = error
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        payload, status = self.replies.pop(0) if self.replies else ({"ajaxCallResult": "S"}, 200)
        if isinstance(payload, bytes):
            return httpx.Response(status, content=payload)
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def form(self, index: int = -1) -> dict[str, str]:
        """Decode the form body of a recorded request."""
        body = self.requests[index].content.decode("utf-8")
        return {key: values[0] for key, values in parse_qs(body, keep_blank_values=True).items()}


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def config(tmp_path: Path) -> AdapterConfig:
    return AdapterConfig(
        base_url="http://backend.test",
        domain_id="NODE0000000001",
        session_id=TOKEN,
        env_file=str(tmp_path / ".env"),
    )


@pytest.fixture()
def session(config: AdapterConfig) -> SessionState:
    return SessionState(token=config.session_id, env_file=config.env_file)


@pytest.fixture()
def gateway(config: AdapterConfig, session: SessionState, backend: FakeBackend) -> BackendGateway:
    return BackendGateway(config, session, transport=backend.transport)
