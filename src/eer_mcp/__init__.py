"""EER MCP - MCP adapter for the EER ticket, knowledge-base and task-log backend."""

__version__ = "0.1.0"

from eer_mcp.config import AdapterConfig

__all__ = ["AdapterConfig", "__version__"]
