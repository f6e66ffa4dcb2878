"""FastMCP server exposing the operation and prompt catalogs."""

from eer_mcp.mcp.server import create_server, get_server, reset_server

__all__ = ["create_server", "get_server", "reset_server"]
