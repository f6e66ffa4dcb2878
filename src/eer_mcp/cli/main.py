"""Main Click CLI entry point for the ``eer-mcp`` command.

Entry point registered in pyproject.toml::

    [project.scripts]
    eer-mcp = "eer_mcp.cli.main:cli"

Usage examples::

    eer-mcp --version
    eer-mcp serve                              # stdio, for MCP clients
    eer-mcp serve --transport sse --port 3000  # HTTP + SSE
    eer-mcp status --json-output
    eer-mcp session set 1kymf8yzu71xdb0cbxpzuffxb
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Optional

import click

from eer_mcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="eer-mcp")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="EER_MCP_ENV_FILE",
    help="Path to the .env settings file. Defaults to ./.env.",
)
@click.pass_context
def cli(ctx: click.Context, env_file: Optional[str]) -> None:
    """EER MCP -- ticket, knowledge-base and task-log tools for MCP clients."""
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file


def _load_config(ctx: click.Context):
    from eer_mcp.config import AdapterConfig

    try:
        return AdapterConfig.load(env_file=ctx.obj.get("env_file"))
    except ValueError as exc:
        click.secho(f"ERROR: Invalid configuration: {exc}", fg="red", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default="stdio",
    show_default=True,
    help="stdio for a client-spawned process, sse for an HTTP server.",
)
@click.option("--host", default=None, help="Bind host for sse. Defaults to HOST or 127.0.0.1.")
@click.option("--port", type=int, default=None, help="Bind port for sse. Defaults to PORT or 3000.")
@click.pass_context
def serve(ctx: click.Context, transport: str, host: Optional[str], port: Optional[int]) -> None:
    """Run the MCP server."""
    from eer_mcp.mcp.server import create_server

    config = _load_config(ctx)
    server = create_server(config=config)

    if transport == "stdio":
        server.run(transport="stdio")
    else:
        bind_host = host or config.host
        bind_port = port or config.port
        click.echo(f"EER MCP server listening on http://{bind_host}:{bind_port}/sse", err=True)
        server.run(transport="sse", host=bind_host, port=bind_port)


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--json-output",
    "output_json",
    is_flag=True,
    default=False,
    help="Output status as JSON instead of human-readable text.",
)
@click.pass_context
def status(ctx: click.Context, output_json: bool) -> None:
    """Show the resolved configuration and the tool catalog.

    The session token is always masked.
    """
    config = _load_config(ctx)
    data = _collect_status(config)

    if output_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        _render_status_text(data)


def _collect_status(config) -> dict:
    from eer_mcp.mcp.server import describe_tools

    return {
        "version": __version__,
        "endpoint": config.endpoint_url,
        "domain_id": config.domain_id,
        "session_configured": config.session_configured,
        "session_id": config.to_dict()["session_id"],
        "env_file": config.env_file,
        "timeout_seconds": config.timeout_seconds,
        "log_level": config.log_level,
        "sse": {"host": config.host, "port": config.port},
        "tools": describe_tools(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _render_status_text(data: dict) -> None:
    click.secho("EER MCP -- Status", fg="cyan", bold=True)
    click.secho("=" * 32, fg="cyan")
    click.echo(f"Version: {data['version']}")
    click.echo()

    click.secho("Backend", fg="blue", bold=True)
    click.secho("-" * 20, fg="blue")
    click.echo(f"  Endpoint:  {data['endpoint']}")
    click.echo(f"  Domain ID: {data['domain_id']}")
    click.echo(f"  Timeout:   {data['timeout_seconds']}s")
    click.echo()

    click.secho("Session", fg="green", bold=True)
    click.secho("-" * 20, fg="green")
    if data["session_configured"]:
        click.echo(f"  Session ID: {data['session_id']}")
    else:
        click.secho("  Session ID: (not configured)", fg="yellow")
    click.echo(f"  Settings:   {data['env_file']}")
    click.echo()

    click.secho("Tools", fg="magenta", bold=True)
    click.secho("-" * 20, fg="magenta")
    for tool in data["tools"]:
        click.echo(f"  {tool['name']:<38} {tool['command']}")
    click.echo("  update_session_id")


# ---------------------------------------------------------------------------
# session
# ---------------------------------------------------------------------------


@cli.group()
def session() -> None:
    """Manage the stored session ID."""


@session.command("set")
@click.argument("session_id")
@click.option(
    "--no-save",
    "no_save",
    is_flag=True,
    default=False,
    help="Validate only; do not write the .env file.",
)
@click.pass_context
def set_session(ctx: click.Context, session_id: str, no_save: bool) -> None:
    """Store SESSION_ID in the .env settings file."""
    from eer_mcp.operations import update_session
    from eer_mcp.session import SessionState

    config = _load_config(ctx)
    state = SessionState(token=config.session_id, env_file=config.env_file)
    result = update_session(state, {"sessionId": session_id, "saveToFile": not no_save})

    if isinstance(result, dict):
        click.secho(f"ERROR: {result['message']}", fg="red", err=True)
        sys.exit(1)
    click.echo(result)
