"""Summary models returned by the operation catalog.

Summaries are the stable, compact shapes tools hand back to MCP callers.  They
never carry raw backend payloads or image data.  Keys are camelCase on output
(``to_camel`` aliases).

Backend fields are loosely typed (the same field may arrive as a number, a
string or a nested object), so pass-through values use :data:`Passthrough` and
are copied as received.
Values computed by the adapter, such as counts, are plain ``int``.

Optional members such as ``contents`` are omitted from the output unless they
were set, see :meth:`Summary.to_output`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Passthrough = Any


class Summary(BaseModel):
    """Base for all summary models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_output(self) -> dict:
        """Dump with camelCase keys, leaving out members that were never set."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Shared parts
# ---------------------------------------------------------------------------


class AttachmentCounts(Summary):
    in_count: int = 0
    out_count: int = 0


class Actor(Summary):
    """Creator or last updater of a knowledge-base article."""

    name: Passthrough = None
    id: Passthrough = None
    date: Passthrough = None


# ---------------------------------------------------------------------------
# ticket_select_list
# ---------------------------------------------------------------------------


class TicketRow(Summary):
    ticket_id: Passthrough = None
    status: Passthrough = None
    title: Passthrough = None
    customer_name: Passthrough = None
    customer_id: Passthrough = None
    customer_email: Passthrough = None
    customer_no: Passthrough = None
    account_name: Passthrough = None
    node_path: Passthrough = None
    connect_date: Passthrough = None


class TicketListSummary(Summary):
    total_count: Passthrough = 0
    total_page: Passthrough = 1
    returned_count: int = 0
    tickets: list[TicketRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# qna_select_qna_form
# ---------------------------------------------------------------------------


class Customer(Summary):
    id: Passthrough = None
    name: Passthrough = None
    email: Passthrough = None
    tel: Passthrough = None
    company_no: Passthrough = None


class Assignee(Summary):
    account_id: Passthrough = None
    account_name: Passthrough = None


class TicketDates(Summary):
    connected: Passthrough = None
    started: Passthrough = None
    ended: Passthrough = None


class ProcessHistoryEntry(Summary):
    process_seq: Passthrough = None
    process_type: Passthrough = None
    status: Passthrough = None
    title: Passthrough = None
    account_name: Passthrough = None
    created_date: Passthrough = None
    attach_count: Passthrough = None
    contents: Optional[str] = None


class TicketDetailSummary(Summary):
    ticket_id: Passthrough = None
    status: Passthrough = None
    question_title: Passthrough = None
    answer_title: Passthrough = None
    customer: Customer = Field(default_factory=Customer)
    assignee: Assignee = Field(default_factory=Assignee)
    node_path: Passthrough = None
    dates: TicketDates = Field(default_factory=TicketDates)
    process_history: list[ProcessHistoryEntry] = Field(default_factory=list)
    attachments: AttachmentCounts = Field(default_factory=AttachmentCounts)


# ---------------------------------------------------------------------------
# qna_select_group_ticket_list
# ---------------------------------------------------------------------------


class GroupTicketRow(Summary):
    no: Passthrough = None
    ticket_id: Passthrough = None
    status: Passthrough = None
    title: Passthrough = None
    account_name: Passthrough = None
    connect_date: Passthrough = None
    end_date: Passthrough = None
    attachments: AttachmentCounts = Field(default_factory=AttachmentCounts)
    feedback: Passthrough = None


class GroupTicketListSummary(Summary):
    total_count: Passthrough = 0
    returned_count: int = 0
    tickets: list[GroupTicketRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# qna_select_site_conn_link_list
# ---------------------------------------------------------------------------


class SiteLink(Summary):
    name: Passthrough = None
    type: Passthrough = None
    type_description: Passthrough = None
    url: Passthrough = None


class SiteLinkListSummary(Summary):
    site_id: Passthrough = None
    total_count: int = 0
    links: list[SiteLink] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# kb_select_node_id
# ---------------------------------------------------------------------------


class KbNodeSummary(Summary):
    node_id: Passthrough = None
    customer_id: Passthrough = None
    customer_no: Passthrough = None


# ---------------------------------------------------------------------------
# kb_select_search_kb_list / kb_get_translate_script_km_contents
# ---------------------------------------------------------------------------


class KbListEntry(Summary):
    kb_id: Passthrough = None
    title: Passthrough = None
    node_id: Passthrough = None
    node_path: Passthrough = None
    creator: Actor = Field(default_factory=Actor)
    updater: Actor = Field(default_factory=Actor)
    approval_status: Passthrough = None
    hit_count: Passthrough = None
    attach_count: Passthrough = None
    public_flag: Passthrough = None
    webview_flag: Passthrough = None


class KbSearchSummary(Summary):
    total_count: Passthrough = 0
    returned_count: int = 0
    page_no: Passthrough = 1
    kb_list: list[KbListEntry] = Field(default_factory=list)


class KbDetailSummary(Summary):
    kb_id: Passthrough = None
    title: Passthrough = None
    node_id: Passthrough = None
    node_path: Passthrough = None
    creator: Actor = Field(default_factory=Actor)
    updater: Actor = Field(default_factory=Actor)
    approval_status: Passthrough = None
    hit_count: Passthrough = None
    contents: Optional[str] = None


# ---------------------------------------------------------------------------
# task_select_task_log_list
# ---------------------------------------------------------------------------


class TaskLogEntry(Summary):
    log_id: Passthrough = None
    task_id: Passthrough = None
    log_status: Passthrough = None
    log_time: Passthrough = None
    contents: Passthrough = None
    created_by: Passthrough = None
    created_date: Passthrough = None
    updated_by: Passthrough = None
    updated_date: Passthrough = None
    attachment_count: int = 0


class TaskLogListSummary(Summary):
    task_id: str
    total_logs: int = 0
    logs: list[TaskLogEntry] = Field(default_factory=list)
