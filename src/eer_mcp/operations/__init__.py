"""Operation catalog: the fixed set of backend operations exposed as tools."""

from eer_mcp.operations.base import Operation
from eer_mcp.operations.kb import KB_DETAIL, KB_NODE_LOOKUP, KB_SEARCH
from eer_mcp.operations.qna import GROUP_TICKET_LIST, SITE_LINK_LIST, TICKET_DETAIL
from eer_mcp.operations.session import update_session
from eer_mcp.operations.tasks import TASK_LOG_LIST
from eer_mcp.operations.tickets import TICKET_LIST

# Keyed by tool name, in registration order.
OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        TICKET_LIST,
        TICKET_DETAIL,
        GROUP_TICKET_LIST,
        SITE_LINK_LIST,
        KB_NODE_LOOKUP,
        KB_SEARCH,
        KB_DETAIL,
        TASK_LOG_LIST,
    )
}

__all__ = [
    "GROUP_TICKET_LIST",
    "KB_DETAIL",
    "KB_NODE_LOOKUP",
    "KB_SEARCH",
    "OPERATIONS",
    "Operation",
    "SITE_LINK_LIST",
    "TASK_LOG_LIST",
    "TICKET_DETAIL",
    "TICKET_LIST",
    "update_session",
]
