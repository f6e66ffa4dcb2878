"""Pydantic models for tool inputs and normalized summaries."""

from eer_mcp.models.requests import (
    DateType,
    GroupTicketListInput,
    KbDetailInput,
    KbNodeLookupInput,
    KbSearchInput,
    OperationInput,
    SessionUpdateInput,
    SiteLinkListInput,
    TaskLogListInput,
    TicketDetailInput,
    TicketListInput,
    TicketStatus,
)
from eer_mcp.models.summaries import (
    GroupTicketListSummary,
    KbDetailSummary,
    KbNodeSummary,
    KbSearchSummary,
    SiteLinkListSummary,
    Summary,
    TaskLogListSummary,
    TicketDetailSummary,
    TicketListSummary,
)

__all__ = [
    "DateType",
    "GroupTicketListInput",
    "GroupTicketListSummary",
    "KbDetailInput",
    "KbDetailSummary",
    "KbNodeLookupInput",
    "KbNodeSummary",
    "KbSearchInput",
    "KbSearchSummary",
    "OperationInput",
    "SessionUpdateInput",
    "SiteLinkListInput",
    "SiteLinkListSummary",
    "Summary",
    "TaskLogListInput",
    "TaskLogListSummary",
    "TicketDetailInput",
    "TicketDetailSummary",
    "TicketListInput",
    "TicketListSummary",
    "TicketStatus",
]
