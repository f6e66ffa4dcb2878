"""Ticket detail, group ticket and site link operations (``qnaUIService``)."""

from __future__ import annotations

from typing import Any, Mapping

from eer_mcp.errors import NotFoundError
from eer_mcp.models.requests import GroupTicketListInput, SiteLinkListInput, TicketDetailInput
from eer_mcp.models.summaries import (
    Assignee,
    AttachmentCounts,
    Customer,
    GroupTicketListSummary,
    GroupTicketRow,
    ProcessHistoryEntry,
    SiteLink,
    SiteLinkListSummary,
    TicketDates,
    TicketDetailSummary,
)
from eer_mcp.operations.base import (
    Operation,
    as_mapping,
    count,
    first_present,
    list_field,
)
from eer_mcp.sanitize import sanitize_html

# Link categories of a customer site.  Unknown codes are shown as-is.
LINK_TYPE_LABELS = {
    "SI": "Scenario",
    "AM": "AM document",
    "CI": "CI document",
    "RD": "Reference document",
    "PR": "Project (Git)",
    "SD": "Deliverable",
}


def link_type_label(code: Any) -> Any:
    return LINK_TYPE_LABELS.get(code, code) if isinstance(code, str) else code


# ---------------------------------------------------------------------------
# qna_select_qna_form
# ---------------------------------------------------------------------------


def _ticket_detail_params(request: TicketDetailInput) -> dict:
    return {"ticketId": request.ticket_id}


def _process_entry(raw: Any, include_contents: bool) -> ProcessHistoryEntry:
    history = as_mapping(raw)
    fields = dict(
        process_seq=history.get("processSeq"),
        process_type=history.get("processType"),
        status=history.get("status"),
        title=history.get("title"),
        account_name=history.get("accountName"),
        created_date=history.get("createdDate"),
        attach_count=history.get("attachCount"),
    )
    if include_contents:
        fields["contents"] = sanitize_html(_text(history.get("contents")))
    return ProcessHistoryEntry(**fields)


def _normalize_ticket_detail(reply: Mapping[str, Any], request: TicketDetailInput) -> TicketDetailSummary:
    qna = as_mapping(reply.get("dataMap")).get("qnaForm")
    if not isinstance(qna, Mapping):
        raise NotFoundError(f"Ticket {request.ticket_id} was not found.")

    history = qna.get("qnaProcessHistoryFormList")
    entries = [
        _process_entry(item, request.include_contents)
        for item in (history if isinstance(history, list) else [])
    ]

    return TicketDetailSummary(
        ticket_id=first_present(qna.get("refQnaId"), qna.get("qnaId")),
        status=qna.get("ticketStatus"),
        question_title=qna.get("questionTitle"),
        answer_title=qna.get("answerTitle"),
        customer=Customer(
            id=qna.get("customerId"),
            name=qna.get("customerName"),
            email=qna.get("customerEmail"),
            tel=qna.get("customerTel"),
            company_no=qna.get("customerNo"),
        ),
        assignee=Assignee(
            account_id=qna.get("accountId"),
            account_name=qna.get("accountName"),
        ),
        node_path=qna.get("nodePath"),
        dates=TicketDates(
            connected=qna.get("connectDate"),
            started=qna.get("startDate"),
            ended=qna.get("endDate"),
        ),
        process_history=entries,
        attachments=AttachmentCounts(
            in_count=count(qna.get("inAttachList")),
            out_count=count(qna.get("outAttachList")),
        ),
    )


TICKET_DETAIL = Operation(
    name="qna_select_qna_form",
    command="qnaUIService.selectQnaForm",
    description=(
        "Get the details of one ticket (command: qnaUIService.selectQnaForm).\n"
        "Returns the ticket content, processing history and attachment counts by ticket ID."
    ),
    input_model=TicketDetailInput,
    build_params=_ticket_detail_params,
    normalize=_normalize_ticket_detail,
)


# ---------------------------------------------------------------------------
# qna_select_group_ticket_list
# ---------------------------------------------------------------------------


def _group_ticket_params(request: GroupTicketListInput) -> dict:
    # The backend spells this key in lower case.
    return {
        "ticketId": request.ticket_id,
        "servicetype": request.service_type,
        "page": request.page,
        "rows": request.rows,
    }


def _normalize_group_tickets(reply: Mapping[str, Any], request: GroupTicketListInput) -> GroupTicketListSummary:
    items = list_field(reply, "historyList")
    if items is None:
        raise NotFoundError(f"No group ticket list for {request.ticket_id}.")

    tickets = []
    for raw in items:
        item = as_mapping(raw)
        tickets.append(
            GroupTicketRow(
                no=item.get("no"),
                ticket_id=item.get("ticketId"),
                status=item.get("ticketStatus"),
                title=item.get("questionTitle"),
                account_name=item.get("accountName"),
                connect_date=item.get("connectDate"),
                end_date=item.get("endDate"),
                attachments=AttachmentCounts(
                    in_count=_int_or_zero(item.get("inAttachCount")),
                    out_count=_int_or_zero(item.get("outAttachCount")),
                ),
                feedback=item.get("feedback"),
            )
        )

    return GroupTicketListSummary(
        total_count=first_present(reply.get("totalCount"), 0),
        returned_count=len(tickets),
        tickets=tickets,
    )


GROUP_TICKET_LIST = Operation(
    name="qna_select_group_ticket_list",
    command="qnaUIService.selectGroupTicketList",
    description=(
        "List the tickets grouped with a ticket (command: qnaUIService.selectGroupTicketList).\n"
        "Shows the history of tickets filed on the same subject."
    ),
    input_model=GroupTicketListInput,
    build_params=_group_ticket_params,
    normalize=_normalize_group_tickets,
)


# ---------------------------------------------------------------------------
# qna_select_site_conn_link_list
# ---------------------------------------------------------------------------


def _site_link_params(request: SiteLinkListInput) -> dict:
    return {"siteId": request.site_id}


def _normalize_site_links(reply: Mapping[str, Any], request: SiteLinkListInput) -> SiteLinkListSummary:
    items = list_field(reply, "linkList")
    if items is None:
        raise NotFoundError(f"No link list for site {request.site_id}.")

    links = []
    for raw in items:
        item = as_mapping(raw)
        links.append(
            SiteLink(
                name=item.get("link_name"),
                type=item.get("link_type"),
                type_description=link_type_label(item.get("link_type")),
                url=item.get("link_url"),
            )
        )

    return SiteLinkListSummary(
        site_id=reply.get("siteId"),
        total_count=len(links),
        links=links,
    )


SITE_LINK_LIST = Operation(
    name="qna_select_site_conn_link_list",
    command="qnaUIService.selectSiteConnLinkList",
    description=(
        "List the links registered for a customer site (command: qnaUIService.selectSiteConnLinkList).\n"
        "Covers scenarios, documents, Git repositories and deliverables; most links point to "
        "Google Drive documents.\nsiteId is the ticket's customerId."
    ),
    input_model=SiteLinkListInput,
    build_params=_site_link_params,
    normalize=_normalize_site_links,
)


def _int_or_zero(value: Any) -> Any:
    return 0 if value is None else value


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
