"""Tests for the FastMCP server bootstrap.

Verifies server creation, singleton management, tool and prompt
registration, tool execution through FastMCP, and the /health route.
"""

from __future__ import annotations

import asyncio
import json
import time

import httpx
import pytest
from starlette.testclient import TestClient

from eer_mcp.mcp.server import (
    create_server,
    get_config,
    get_gateway,
    get_server,
    get_session,
    health_payload,
    reset_server,
)

EXPECTED_TOOLS = {
    "ticket_select_list",
    "qna_select_qna_form",
    "qna_select_group_ticket_list",
    "qna_select_site_conn_link_list",
    "kb_select_node_id",
    "kb_select_search_kb_list",
    "kb_get_translate_script_km_contents",
    "task_select_task_log_list",
    "update_session_id",
}

EXPECTED_PROMPTS = {
    "search_tickets",
    "analyze_tickets",
    "daily_ticket_report",
    "inquire_ticket",
    "ticket_workflow",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _result_text(result) -> str:
    """Text of the first content item of a FastMCP ToolResult."""
    return result.content[0].text


def _parse_tool_result(result) -> dict:
    return json.loads(_result_text(result))


def _run_tool(server, name: str, arguments: dict):
    tools = asyncio.run(server.get_tools())
    return asyncio.run(tools[name].run(arguments))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_server():
    """Ensure the server singleton is reset before and after each test."""
    reset_server()
    yield
    reset_server()


@pytest.fixture()
def server(config, backend):
    return create_server(config=config, transport=backend.transport)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_accessors_before_creation_raise(self) -> None:
        for accessor in (get_config, get_session, get_gateway):
            with pytest.raises(RuntimeError, match="create_server"):
                accessor()

    def test_create_wires_shared_state(self, server, config) -> None:
        assert get_server() is server
        assert get_config() is config
        assert get_gateway().session is get_session()
        assert get_session().is_active

    def test_create_loads_env_file(self, tmp_path) -> None:
        env_file = tmp_path / "custom.env"
        env_file.write_text("SESSION_ID=fromfile\nSPRING_DOMAIN_ID=NODE0000000777\n", encoding="utf-8")
        create_server(env_file=str(env_file))
        assert get_session().token == "fromfile"
        assert get_config().domain_id == "NODE0000000777"

    def test_reset_clears_singletons(self, server) -> None:
        reset_server()
        with pytest.raises(RuntimeError):
            get_session()

    def test_server_name(self, server) -> None:
        assert server.name == "eer-mcp"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegistration:
    def test_all_tools_registered(self, server) -> None:
        tools = asyncio.run(server.get_tools())
        assert set(tools) == EXPECTED_TOOLS

    def test_all_prompts_registered(self, server) -> None:
        prompts = asyncio.run(server.get_prompts())
        assert set(prompts) == EXPECTED_PROMPTS

    def test_tool_parameters_are_camel_case(self, server) -> None:
        tools = asyncio.run(server.get_tools())
        properties = tools["ticket_select_list"].parameters["properties"]
        assert {"startDate", "endDate", "ticketStatus", "customerName"} <= set(properties)
        assert set(tools["ticket_select_list"].parameters["required"]) == {"startDate", "endDate"}

    def test_tool_descriptions_name_command(self, server) -> None:
        tools = asyncio.run(server.get_tools())
        assert "ticketUIService.selectList" in tools["ticket_select_list"].description
        assert "kbUIService.selectNodeId" in tools["kb_select_node_id"].description


# ---------------------------------------------------------------------------
# Tool execution
# ---------------------------------------------------------------------------


class TestToolExecution:
    def test_ticket_detail_round_trip(self, server, backend) -> None:
        backend.reply(
            {
                "ajaxCallResult": "S",
                "dataMap": {"qnaForm": {"refQnaId": "TCKT0000177000", "ticketStatus": "OPEN"}},
            }
        )
        result = _parse_tool_result(_run_tool(server, "qna_select_qna_form", {"ticketId": "TCKT0000177000"}))
        assert result["ticketId"] == "TCKT0000177000"
        assert result["status"] == "OPEN"
        assert backend.form()["command"] == "qnaUIService.selectQnaForm"

    def test_omitted_optionals_use_catalog_defaults(self, server, backend) -> None:
        backend.reply({"ajaxCallResult": "S", "dataList": []})
        _run_tool(
            server,
            "ticket_select_list",
            {"startDate": "20260101000000", "endDate": "20260101235959"},
        )
        form = backend.form()
        assert form["rows"] == "20"
        assert form["ticketStatus"] == "ALL"

    def test_validation_error_is_structured(self, server, backend) -> None:
        result = _parse_tool_result(
            _run_tool(server, "kb_get_translate_script_km_contents", {"kbId": "bad"})
        )
        assert result["error"] is True
        assert result["errorType"] == "ValidationError"
        assert backend.calls == 0

    def test_empty_task_log_returns_text(self, server, backend) -> None:
        backend.reply({"ajaxCallResult": "S", "taskLogList": []})
        result = _run_tool(server, "task_select_task_log_list", {"taskId": "TASK0000012098"})
        assert _result_text(result) == "No task logs found."

    def test_slow_backend_does_not_block_other_tools(self, config) -> None:
        async def slow_backend(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.4)
            return httpx.Response(200, json={"ajaxCallResult": "S", "taskLogList": []})

        server = create_server(config=config, transport=httpx.MockTransport(slow_backend))

        async def scenario() -> float:
            tools = await server.get_tools()
            started = time.monotonic()
            await asyncio.gather(
                tools["task_select_task_log_list"].run({"taskId": "TASK0000012098"}),
                tools["task_select_task_log_list"].run({"taskId": "TASK0000012099"}),
            )
            return time.monotonic() - started

        assert asyncio.run(scenario()) < 0.75

    def test_update_session_applies_to_next_call(self, server, backend, config) -> None:
        text = _result_text(
            _run_tool(server, "update_session_id", {"sessionId": "abc123", "saveToFile": False})
        )
        assert "Session ID updated" in text

        backend.reply({"ajaxCallResult": "S", "linkList": []})
        _run_tool(server, "qna_select_site_conn_link_list", {"siteId": "49"})
        assert backend.requests[-1].headers["cookie"] == "JSESSIONID=abc123"

    def test_update_session_persists(self, server, config) -> None:
        _run_tool(server, "update_session_id", {"sessionId": "abc123"})
        with open(config.env_file, encoding="utf-8") as handle:
            assert "SESSION_ID=abc123" in handle.read()


# ---------------------------------------------------------------------------
# Prompts and health
# ---------------------------------------------------------------------------


class TestPromptsAndHealth:
    def test_prompt_render(self, server) -> None:
        prompts = asyncio.run(server.get_prompts())
        messages = asyncio.run(prompts["inquire_ticket"].render({"ticketId": "TCKT0000177000"}))
        assert "TCKT0000177000" in messages[0].content.text
        assert "qna_select_qna_form" in messages[0].content.text

    def test_health_payload(self, server) -> None:
        payload = health_payload()
        assert set(payload) == {"status", "server", "version", "sessionConfigured"}
        assert payload["status"] == "ok"
        assert payload["server"] == "eer-mcp"
        assert payload["sessionConfigured"] is True

    def test_health_route(self, server) -> None:
        client = TestClient(server.http_app(transport="sse"))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["sessionConfigured"] is True

    def test_health_without_session(self) -> None:
        from eer_mcp.config import AdapterConfig

        create_server(config=AdapterConfig(session_id=""))
        assert health_payload()["sessionConfigured"] is False
