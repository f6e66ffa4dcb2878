"""Click CLI for operators.

Provides the ``eer-mcp`` entry point with subcommands:
- ``eer-mcp serve``        -- Run the MCP server over stdio or SSE.
- ``eer-mcp status``       -- Show the resolved configuration and tool catalog.
- ``eer-mcp session set``  -- Store a new SESSION_ID in the .env file.
"""

from eer_mcp.cli.main import cli, serve, set_session, status

__all__ = ["cli", "serve", "set_session", "status"]
