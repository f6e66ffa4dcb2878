"""FastMCP server bootstrap for the EER adapter.

Builds the FastMCP server instance, wires the shared :class:`SessionState`
into one :class:`BackendGateway`, and registers the nine tools, the five
prompts and the ``/health`` route.

Typical usage as an MCP server entry point::

    # Via the registered entry point (pyproject.toml):
    # [project.entry-points."mcp.servers"]
    # eer-mcp = "eer_mcp.mcp:create_server"

    # Or programmatically:
    from eer_mcp.mcp.server import create_server
    server = create_server()
    server.run(transport="stdio")

Every tool returns either a summary dict, a short status text, or the
structured failure payload of :meth:`eer_mcp.errors.AdapterError.to_result`.
Tools never raise for backend or input problems.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx
from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from eer_mcp import __version__
from eer_mcp.config import AdapterConfig, mask_token
from eer_mcp.gateway import BackendGateway
from eer_mcp.operations import OPERATIONS, update_session
from eer_mcp.prompts import (
    analyze_tickets_prompt,
    daily_ticket_report_prompt,
    inquire_ticket_prompt,
    search_tickets_prompt,
    ticket_workflow_prompt,
)
from eer_mcp.session import SessionState

logger = logging.getLogger(__name__)

SERVER_NAME = "eer-mcp"

# Module-level singletons.  Created on first call to create_server() or
# get_server() so that every tool shares one session cell and one gateway.
_server_instance: Optional[FastMCP] = None
_config: Optional[AdapterConfig] = None
_session: Optional[SessionState] = None
_gateway: Optional[BackendGateway] = None


def create_server(
    config: Optional[AdapterConfig] = None,
    env_file: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastMCP:
    """Create and configure the FastMCP server instance.

    This is the factory function registered in pyproject.toml as the
    ``mcp.servers`` entry point.  It:

    1. Loads configuration (AdapterConfig) unless one is given.
    2. Creates the SessionState and the BackendGateway.
    3. Instantiates the FastMCP server.
    4. Registers tools, prompts and the health route.

    Parameters
    ----------
    config:
        Ready configuration.  When None, ``AdapterConfig.load(env_file)``.
    env_file:
        Settings file passed to ``AdapterConfig.load``.
    transport:
        Optional ``httpx`` transport for the gateway (tests).

    Returns
    -------
    FastMCP
        The configured server instance.
    """
    global _server_instance, _config, _session, _gateway

    _config = config if config is not None else AdapterConfig.load(env_file=env_file)
    _config.configure_logging()

    logger.info("Initializing EER MCP server v%s", __version__)
    logger.info("Backend endpoint: %s", _config.endpoint_url)
    logger.info("Domain ID: %s", _config.domain_id)
    if _config.session_configured:
        logger.info("Session ID: %s", mask_token(_config.session_id))
    else:
        logger.warning("SESSION_ID is not set. Backend tools fail until update_session_id is called.")

    _session = SessionState(token=_config.session_id, env_file=_config.env_file)
    _gateway = BackendGateway(_config, _session, transport=transport)

    _server_instance = FastMCP(
        name=SERVER_NAME,
        instructions=(
            "Ticket, knowledge-base and task-log lookups against the EER "
            "backend. Dates use YYYYMMDDHHMMSS. When a tool reports an "
            "expired session, ask the user for a fresh JSESSIONID and call "
            "update_session_id."
        ),
        version=__version__,
    )

    _register_tools(_server_instance)
    _register_prompts(_server_instance)
    _register_routes(_server_instance)

    logger.info(
        "FastMCP server created. %d tools registered.",
        len(OPERATIONS) + 1,
    )
    return _server_instance


def get_server() -> FastMCP:
    """Return the existing server instance, creating it if necessary."""
    if _server_instance is None:
        return create_server()
    return _server_instance


def get_config() -> AdapterConfig:
    """Return the AdapterConfig used by the server.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _config is None:
        raise RuntimeError("Server has not been initialized. Call create_server() first.")
    return _config


def get_session() -> SessionState:
    """Return the shared SessionState.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _session is None:
        raise RuntimeError("Server has not been initialized. Call create_server() first.")
    return _session


def get_gateway() -> BackendGateway:
    """Return the BackendGateway used by every backend tool.

    Raises
    ------
    RuntimeError
        If the server has not been created yet.
    """
    if _gateway is None:
        raise RuntimeError("Server has not been initialized. Call create_server() first.")
    return _gateway


def reset_server() -> None:
    """Reset the server singleton (primarily for testing)."""
    global _server_instance, _config, _session, _gateway
    _server_instance = None
    _config = None
    _session = None
    _gateway = None
    logger.debug("Server singleton reset.")


def health_payload() -> dict:
    """Body of the ``GET /health`` response."""
    return {
        "status": "ok",
        "server": SERVER_NAME,
        "version": __version__,
        "sessionConfigured": _session is not None and _session.is_active,
    }


async def _invoke(name: str, arguments: dict) -> Union[dict, str]:
    # Only forward what the caller supplied so the catalog's defaults apply.
    supplied = {key: value for key, value in arguments.items() if value is not None}
    return await OPERATIONS[name].invoke(get_gateway(), supplied)


# ---------------------------------------------------------------------------
# Tool registration
# ---------------------------------------------------------------------------


def _register_tools(server: FastMCP) -> None:
    """Register the operation catalog as MCP tools.

    Parameter names are camelCase because they are the wire contract the
    MCP clients see.  Format checks (ticket ID patterns, date formats, row
    limits) happen in the catalog so that failures come back as structured
    results instead of protocol errors.
    """

    @server.tool()
    async def ticket_select_list(
        startDate: str,
        endDate: str,
        page: Optional[int] = None,
        rows: Optional[int] = None,
        dateType: Optional[str] = None,
        ticketStatus: Optional[str] = None,
        customerName: Optional[str] = None,
        customerId: Optional[str] = None,
        customerEmail: Optional[str] = None,
        customerTel: Optional[str] = None,
        customerNo: Optional[str] = None,
        questionTitle: Optional[str] = None,
        searchTicketId: Optional[str] = None,
        searchContents: Optional[str] = None,
        accountId: Optional[str] = None,
        nodeId: Optional[str] = None,
    ) -> dict:
        """Search the ticket list (command: ticketUIService.selectList).

        Args:
            startDate: Start of the period, YYYYMMDDHHMMSS (e.g. 20260219000000).
            endDate: End of the period, YYYYMMDDHHMMSS (e.g. 20260219235959).
            page: Page number, default 1.
            rows: Rows per page (1-100), default 20.
            dateType: connect_date (default), end_date or create_date.
            ticketStatus: ALL (default), OPEN, CLOSED, PENDING, RESOLVED or ANSWER_ING.
            customerName: Filter by customer name.
            customerId: Filter by customer ID.
            customerEmail: Filter by customer email.
            customerTel: Filter by customer phone number.
            customerNo: Filter by customer company.
            questionTitle: Filter by words in the question title.
            searchTicketId: Filter by ticket ID.
            searchContents: Filter by words in the ticket content.
            accountId: Filter by assignee account ID.
            nodeId: Filter by node ID.

        Returns:
            ``{totalCount, totalPage, returnedCount, tickets}`` or an error result.
        """
        return await _invoke("ticket_select_list", locals())

    @server.tool()
    async def qna_select_qna_form(ticketId: str, includeContents: Optional[bool] = None) -> dict:
        """Get the details of one ticket (command: qnaUIService.selectQnaForm).

        Returns the ticket content, processing history and attachment counts.
        Inline images in the history are replaced by short placeholders.

        Args:
            ticketId: Ticket ID, TCKT + 10 digits (e.g. TCKT0000177000).
            includeContents: Include the processing history text, default false.
        """
        return await _invoke("qna_select_qna_form", locals())

    @server.tool()
    async def qna_select_group_ticket_list(
        ticketId: str,
        serviceType: Optional[str] = None,
        page: Optional[int] = None,
        rows: Optional[int] = None,
    ) -> dict:
        """List the tickets grouped with a ticket (command: qnaUIService.selectGroupTicketList).

        Shows the history of tickets filed on the same subject.

        Args:
            ticketId: Ticket ID, TCKT + 10 digits.
            serviceType: Service type, default SVQNA.
            page: Page number, default 1.
            rows: Rows per page (1-100), default 10.
        """
        return await _invoke("qna_select_group_ticket_list", locals())

    @server.tool()
    async def qna_select_site_conn_link_list(siteId: str) -> dict:
        """List the links registered for a customer site (command: qnaUIService.selectSiteConnLinkList).

        Covers scenarios, documents, Git repositories and deliverables.  Most
        links point to Google Drive documents.

        Args:
            siteId: Customer site ID (the ticket's customerId).
        """
        return await _invoke("qna_select_site_conn_link_list", locals())

    @server.tool()
    async def kb_select_node_id(alias: str, customerNo: str, moreFlag: Optional[bool] = None) -> dict:
        """Look up the knowledge-base node ID of a customer (command: kbUIService.selectNodeId).

        The returned nodeId is the input for kb_select_search_kb_list.

        Args:
            alias: Customer ID (the ticket's customerId, e.g. 49).
            customerNo: Customer company (the ticket's customerNo).
            moreFlag: Extra flag, default false.
        """
        return await _invoke("kb_select_node_id", locals())

    @server.tool()
    async def kb_select_search_kb_list(
        startDate: str,
        endDate: str,
        alias: str,
        nodeId: str,
        kbId: Optional[str] = None,
        searchId: Optional[str] = None,
        page: Optional[int] = None,
        rows: Optional[int] = None,
    ) -> dict:
        """Search knowledge-base articles (command: kbUIService.selectSearchKbList).

        Args:
            startDate: Start of the period, YYYYMMDDHHMMSS.
            endDate: End of the period, YYYYMMDDHHMMSS.
            alias: Customer ID (the ticket's customerId).
            nodeId: KB node ID from kb_select_node_id (e.g. NODE0000000456).
            kbId: Filter by KB ID (e.g. KNOW0000005091).
            searchId: Search keyword.
            page: Page number, default 1.
            rows: Rows per page (1-100), default 10.
        """
        return await _invoke("kb_select_search_kb_list", locals())

    @server.tool()
    async def kb_get_translate_script_km_contents(
        kbId: str,
        nodeId: Optional[str] = None,
        serviceType: Optional[str] = None,
        includeContents: Optional[bool] = None,
    ) -> dict:
        """Get one knowledge-base article (command: kbUIService.getTranslateScriptKmContents).

        Args:
            kbId: KB ID, KNOW + 10 digits (e.g. KNOW0000005091).
            nodeId: Node ID (e.g. NODE0000000456).
            serviceType: Service type, default SVKNW.
            includeContents: Include the article text, default true.
        """
        return await _invoke("kb_get_translate_script_km_contents", locals())

    @server.tool()
    async def task_select_task_log_list(taskId: str) -> Union[dict, str]:
        """List the work logs of a task (command: taskUIService.selectTaskLogList).

        Args:
            taskId: Task ID (e.g. TASK0000012098).

        Returns:
            ``{taskId, totalLogs, logs}``, a short text when the task has no
            logs, or an error result.
        """
        return await _invoke("task_select_task_log_list", locals())

    @server.tool()
    def update_session_id(sessionId: str, saveToFile: bool = True) -> Union[dict, str]:
        """Update the session ID used for backend calls.

        The new JSESSIONID applies immediately to every following call and is
        saved to the .env file unless saveToFile is false.

        Args:
            sessionId: New JSESSIONID value (e.g. 1kymf8yzu71xdb0cbxpzuffxb).
            saveToFile: Save to the .env file, default true.
        """
        return update_session(get_session(), {"sessionId": sessionId, "saveToFile": saveToFile})


# ---------------------------------------------------------------------------
# Prompt registration
# ---------------------------------------------------------------------------


def _register_prompts(server: FastMCP) -> None:
    """Register the prompt catalog."""

    @server.prompt()
    def search_tickets(query: str) -> str:
        """Search tickets in natural language; the request is turned into ticket_select_list calls."""
        return search_tickets_prompt(query)

    @server.prompt()
    def analyze_tickets(period: str, focus: Optional[str] = None) -> str:
        """Analyze the tickets of a period for patterns, trends and problems."""
        return analyze_tickets_prompt(period, focus)

    @server.prompt()
    def daily_ticket_report(date: Optional[str] = None) -> str:
        """Write a daily ticket report. date is YYYYMMDD, default today."""
        return daily_ticket_report_prompt(date)

    @server.prompt()
    def inquire_ticket(ticketId: str) -> str:
        """Full inquiry of one ticket: detail, task logs, group tickets and related knowledge."""
        return inquire_ticket_prompt(ticketId)

    @server.prompt()
    def ticket_workflow(ticketId: str, workflow: str = "comprehensive", depth: str = "normal") -> str:
        """Analyze a ticket with a workflow: history, technical, comprehensive or quick.

        depth is shallow, normal or deep.
        """
        return ticket_workflow_prompt(ticketId, workflow, depth)


# ---------------------------------------------------------------------------
# HTTP routes
# ---------------------------------------------------------------------------


def _register_routes(server: FastMCP) -> None:
    """Register plain HTTP routes served next to the SSE transport."""

    @server.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse(health_payload())


def describe_tools() -> list[dict[str, Any]]:
    """Name, backend command and summary line of each catalog tool, in registration order."""
    return [
        {"name": op.name, "command": op.command, "summary": op.description.splitlines()[0]}
        for op in OPERATIONS.values()
    ]
