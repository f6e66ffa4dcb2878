"""Ticket list operation (``ticketUIService.selectList``).

The backend's ticket grid expects well over a hundred form fields, most of
them blank.  That field list lives in ``data/ticket_list_params.json`` so it
can be diffed against backend changes; caller arguments are merged over it.
"""

from __future__ import annotations

import json
import time
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping

from eer_mcp.errors import NotFoundError
from eer_mcp.models.requests import TicketListInput
from eer_mcp.models.summaries import TicketListSummary, TicketRow
from eer_mcp.operations.base import Operation, as_mapping, first_present, list_field

PARAMS_RESOURCE = "ticket_list_params.json"


@lru_cache(maxsize=1)
def load_param_template() -> dict:
    """Load the ticket list parameter contract shipped with the package."""
    resource = resources.files("eer_mcp") / "data" / PARAMS_RESOURCE
    text = resource.read_text(encoding="utf-8")
    return json.loads(text)


def default_params() -> dict:
    """Return a fresh copy of the full default parameter bag, option fields included."""
    template = load_param_template()
    params = dict(template["defaults"])
    options = template["optionFields"]
    for i in range(1, options["count"] + 1):
        params[f"{options['prefix']}{i:0{options['width']}d}"] = ""
    return params


def build_params(request: TicketListInput) -> dict:
    params = default_params()
    status = request.ticket_status.value
    params.update(
        {
            "page": request.page,
            "rows": request.rows,
            "startDate": request.start_date,
            "endDate": request.end_date,
            "dateType": request.date_type.value,
            "ticketStatus": status,
            "selectTicketStatus": status,
            "selTicketStatus": status,
            "customerId": request.customer_id,
            "customerName": request.customer_name,
            "customerEmail": request.customer_email,
            "customerTel": request.customer_tel,
            "customerNo": request.customer_no,
            "accountId": request.account_id,
            "nodeId": request.node_id,
            "questionTitle": request.question_title,
            "searchTicketId": request.search_ticket_id,
            "searchContents": request.search_contents,
            "nd": int(time.time() * 1000),
        }
    )
    return params


def normalize(reply: Mapping[str, Any], request: TicketListInput) -> TicketListSummary:
    rows = list_field(reply, "dataList")
    if rows is None:
        raise NotFoundError("The ticket list reply has no dataList.")

    tickets = []
    for raw in rows:
        row = as_mapping(raw)
        tickets.append(
            TicketRow(
                ticket_id=row.get("ticketId"),
                status=row.get("ticketStatus"),
                title=row.get("questionTitle"),
                customer_name=row.get("customerName"),
                customer_id=row.get("customerId"),
                customer_email=row.get("customerEmail"),
                customer_no=row.get("customerNo"),
                account_name=row.get("accountName"),
                node_path=row.get("nodePath"),
                connect_date=row.get("connectDate"),
            )
        )

    return TicketListSummary(
        total_count=first_present(reply.get("totalCount"), 0),
        total_page=first_present(reply.get("totalPage"), 1),
        returned_count=len(tickets),
        tickets=tickets,
    )


TICKET_LIST = Operation(
    name="ticket_select_list",
    command="ticketUIService.selectList",
    description=(
        "Search the ticket list (command: ticketUIService.selectList).\n"
        "Date format: YYYYMMDDHHMMSS (e.g. 20260219000000)."
    ),
    input_model=TicketListInput,
    build_params=build_params,
    normalize=normalize,
)
