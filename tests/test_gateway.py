"""Tests for BackendGateway against an httpx.MockTransport backend."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx
import pytest

from eer_mcp.errors import AuthError, SessionExpiredError, TransportError
from eer_mcp.gateway import BackendGateway, build_form, form_value, is_session_expired
from eer_mcp.session import SessionState

from conftest import TOKEN


def _send(gateway: BackendGateway, command: str, params=None):
    return asyncio.run(gateway.send(command, params))


class TestSend:
    def test_posts_form_to_ajax_path(self, gateway, backend) -> None:
        backend.reply({"ajaxCallResult": "S", "value": 1})
        reply = _send(gateway, "ticketUIService.selectList", {"page": 1, "rows": 20})

        assert reply == {"ajaxCallResult": "S", "value": 1}
        request = backend.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://backend.test/enomix/common/ajaxHandler.ex"
        assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
        assert request.headers["x-requested-with"] == "XMLHttpRequest"

    def test_form_body_carries_command_and_domain(self, gateway, backend) -> None:
        _send(gateway, "qnaUIService.selectQnaForm", {"ticketId": "TCKT0000177000"})
        form = backend.form()
        assert form["command"] == "qnaUIService.selectQnaForm"
        assert form["domainId"] == "NODE0000000001"
        assert form["ticketId"] == "TCKT0000177000"

    def test_none_values_are_omitted(self, gateway, backend) -> None:
        _send(gateway, "x.y", {"present": "", "absent": None, "flag": False})
        form = backend.form()
        assert form["present"] == ""
        assert form["flag"] == "false"
        assert "absent" not in form

    def test_cookie_header(self, gateway, backend) -> None:
        _send(gateway, "x.y")
        assert backend.requests[0].headers["cookie"] == f"JSESSIONID={TOKEN}"

    def test_uses_current_token_not_snapshot(self, gateway, backend, session) -> None:
        _send(gateway, "x.y")
        session.update("fresh-token", persist=False)
        _send(gateway, "x.y")
        assert backend.requests[1].headers["cookie"] == "JSESSIONID=fresh-token"

    def test_business_failure_returned_unchanged(self, gateway, backend) -> None:
        backend.reply({"ajaxCallResult": "F", "ajaxCallMessage": "bad input"})
        assert _send(gateway, "x.y") == {"ajaxCallResult": "F", "ajaxCallMessage": "bad input"}

    def test_logs_command_name(self, gateway, backend, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="eer_mcp.gateway"):
            _send(gateway, "kbUIService.selectNodeId")
        assert "kbUIService.selectNodeId" in caplog.text


class TestFailures:
    def test_no_token_raises_auth_error_without_request(self, config, backend) -> None:
        gw = BackendGateway(config, SessionState(), transport=backend.transport)
        with pytest.raises(AuthError):
            _send(gw, "x.y")
        assert backend.calls == 0

    @pytest.mark.parametrize(
        "reply",
        [
            {"ajaxCallResult": "F", "ajaxCallErrorCode": "NO_SESSION"},
            {"ajaxCallResult": "N_SESSION"},
            {"ajaxCallResult": "N", "ajaxCallMessage": "Login session is invalid."},
        ],
    )
    def test_session_expiry_signatures(self, gateway, backend, reply) -> None:
        backend.reply(reply)
        with pytest.raises(SessionExpiredError):
            _send(gateway, "x.y")

    def test_plain_n_result_is_not_expiry(self, gateway, backend) -> None:
        backend.reply({"ajaxCallResult": "N", "ajaxCallMessage": "Something else"})
        assert _send(gateway, "x.y")["ajaxCallResult"] == "N"

    def test_non_json_reply(self, gateway, backend) -> None:
        backend.reply("<html>login page</html>")
        with pytest.raises(TransportError, match="non-JSON"):
            _send(gateway, "x.y")

    def test_non_utf8_reply(self, gateway, backend) -> None:
        # EUC-KR encoded error page
        backend.reply(b"<html>\xb7\xce\xb1\xd7\xc0\xce</html>")
        with pytest.raises(TransportError, match="non-JSON"):
            _send(gateway, "x.y")

    def test_http_error_status_propagates(self, gateway, backend) -> None:
        backend.reply({"error": "boom"}, status=500)
        with pytest.raises(httpx.HTTPStatusError):
            _send(gateway, "x.y")

    def test_connection_error_propagates_unretried(self, gateway, backend) -> None:
        backend.fail_with(httpx.ConnectError("connection refused"))
        with pytest.raises(httpx.ConnectError):
            _send(gateway, "x.y")
        assert backend.calls == 1


class TestConcurrency:
    def test_slow_calls_do_not_block_each_other(self, config, session) -> None:
        async def slow_backend(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.4)
            return httpx.Response(200, json={"ajaxCallResult": "S"})

        gw = BackendGateway(config, session, transport=httpx.MockTransport(slow_backend))

        async def run_both() -> list:
            return await asyncio.gather(gw.send("a.b"), gw.send("c.d"))

        started = time.monotonic()
        replies = asyncio.run(run_both())
        elapsed = time.monotonic() - started

        assert replies == [{"ajaxCallResult": "S"}, {"ajaxCallResult": "S"}]
        assert elapsed < 0.75

    def test_event_loop_keeps_running_during_a_call(self, config, session) -> None:
        async def slow_backend(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.3)
            return httpx.Response(200, json={"ajaxCallResult": "S"})

        gw = BackendGateway(config, session, transport=httpx.MockTransport(slow_backend))
        ticks: list[float] = []

        async def ticker() -> None:
            for _ in range(5):
                ticks.append(time.monotonic())
                await asyncio.sleep(0.05)

        async def scenario() -> None:
            await asyncio.gather(gw.send("a.b"), ticker())

        asyncio.run(scenario())
        gaps = [later - earlier for earlier, later in zip(ticks, ticks[1:])]
        assert len(ticks) == 5
        assert max(gaps) < 0.2


class TestHelpers:
    def test_build_form_flattens(self) -> None:
        form = build_form("a.b", "NODE1", {"page": 2, "flag": True, "skip": None})
        assert form == {"command": "a.b", "domainId": "NODE1", "page": "2", "flag": "true"}

    def test_form_value(self) -> None:
        assert form_value(False) == "false"
        assert form_value(20) == "20"
        assert form_value("x") == "x"

    def test_is_session_expired_ignores_non_mapping(self) -> None:
        assert is_session_expired(["N_SESSION"]) is False
        assert is_session_expired({"ajaxCallResult": "S"}) is False
