"""Knowledge-base operations (``kbUIService``)."""

from __future__ import annotations

from typing import Any, Mapping

from eer_mcp.errors import NotFoundError
from eer_mcp.models.requests import KbDetailInput, KbNodeLookupInput, KbSearchInput
from eer_mcp.models.summaries import Actor, KbDetailSummary, KbListEntry, KbNodeSummary, KbSearchSummary
from eer_mcp.operations.base import Operation, as_mapping, first_present, list_field
from eer_mcp.sanitize import sanitize_text

# Fixed filters the KB search screen always sends.
KB_SEARCH_FLAGS = {
    "whereBy": "created_by",
    "whereByType": "id",
    "whereHitCount": "",
    "hitCount": "",
    "incSubNodeFlag": "Y",
    "isFavorite": "Y",
    "webviewFlag": "Y",
    "nodeWebviewFlag": "Y",
    "publicFlag": "ALL",
    "approvalStatus": "APNOT",
    "dateType": "valide_date",
    "uniqueFlag": "Y",
}


def _creator(item: Mapping[str, Any]) -> Actor:
    return Actor(name=item.get("createdName"), id=item.get("createdBy"), date=item.get("createdDate"))


def _updater(item: Mapping[str, Any]) -> Actor:
    return Actor(name=item.get("updatedName"), id=item.get("updatedBy"), date=item.get("updatedDate"))


# ---------------------------------------------------------------------------
# kb_select_node_id
# ---------------------------------------------------------------------------


def _node_lookup_params(request: KbNodeLookupInput) -> dict:
    return {
        "alias": request.alias,
        "customerNo": request.customer_no,
        "moreFlag": request.more_flag,
    }


def _normalize_node_lookup(reply: Mapping[str, Any], request: KbNodeLookupInput) -> KbNodeSummary:
    node_id = reply.get("nodeId")
    if not node_id:
        raise NotFoundError(f"No KB node found for customer {request.alias} ({request.customer_no}).")
    return KbNodeSummary(
        node_id=node_id,
        customer_id=request.alias,
        customer_no=request.customer_no,
    )


KB_NODE_LOOKUP = Operation(
    name="kb_select_node_id",
    command="kbUIService.selectNodeId",
    description=(
        "Look up the knowledge-base node ID for a customer (command: kbUIService.selectNodeId).\n"
        "Uses the ticket's customerId (as alias) and customerNo; the returned nodeId is the "
        "input for kb_select_search_kb_list."
    ),
    input_model=KbNodeLookupInput,
    build_params=_node_lookup_params,
    normalize=_normalize_node_lookup,
)


# ---------------------------------------------------------------------------
# kb_select_search_kb_list
# ---------------------------------------------------------------------------


def _search_params(request: KbSearchInput) -> dict:
    params = {
        "rows": request.rows,
        "page": request.page,
        "startDate": request.start_date,
        "endDate": request.end_date,
        "alias": request.alias,
        "nodeId": request.node_id,
        "kbId": request.kb_id,
        "searchId": request.search_id,
    }
    params.update(KB_SEARCH_FLAGS)
    return params


def _normalize_search(reply: Mapping[str, Any], request: KbSearchInput) -> KbSearchSummary:
    items = list_field(reply, "dataList")
    if items is None:
        raise NotFoundError("The knowledge-base search reply has no dataList.")

    entries = []
    for raw in items:
        kb = as_mapping(raw)
        entries.append(
            KbListEntry(
                kb_id=kb.get("kbId"),
                title=kb.get("title"),
                node_id=kb.get("nodeId"),
                node_path=kb.get("nodePath"),
                creator=_creator(kb),
                updater=_updater(kb),
                approval_status=kb.get("approvalStatus"),
                hit_count=kb.get("hitCount"),
                attach_count=kb.get("attachCount"),
                public_flag=kb.get("publicFlag"),
                webview_flag=kb.get("webviewFlag"),
            )
        )

    return KbSearchSummary(
        total_count=first_present(reply.get("dataCount"), 0),
        returned_count=len(entries),
        page_no=first_present(reply.get("pageNo"), 1),
        kb_list=entries,
    )


KB_SEARCH = Operation(
    name="kb_select_search_kb_list",
    command="kbUIService.selectSearchKbList",
    description=(
        "Search knowledge-base articles (command: kbUIService.selectSearchKbList).\n"
        "Filter by date range, node and keyword. Date format: YYYYMMDDHHMMSS."
    ),
    input_model=KbSearchInput,
    build_params=_search_params,
    normalize=_normalize_search,
)


# ---------------------------------------------------------------------------
# kb_get_translate_script_km_contents
# ---------------------------------------------------------------------------


def _detail_params(request: KbDetailInput) -> dict:
    return {
        "kbId": request.kb_id,
        "nodeId": request.node_id,
        "serviceType": request.service_type,
        "isLog": False,
    }


def _normalize_detail(reply: Mapping[str, Any], request: KbDetailInput) -> KbDetailSummary:
    kb = as_mapping(reply.get("dataMap")).get("kbForm")
    if not isinstance(kb, Mapping):
        raise NotFoundError(f"Knowledge-base article {request.kb_id} was not found.")

    fields = dict(
        kb_id=kb.get("kbId"),
        title=kb.get("title"),
        node_id=kb.get("nodeId"),
        node_path=as_mapping(kb.get("nodeKbRelMain")).get("nodeName"),
        creator=_creator(kb),
        updater=_updater(kb),
        approval_status=kb.get("approvalStatus"),
        hit_count=kb.get("hitCount"),
    )
    if request.include_contents:
        raw = first_present(kb.get("transScriptContents"), kb.get("contents"))
        fields["contents"] = sanitize_text(raw if isinstance(raw, str) else None)
    return KbDetailSummary(**fields)


KB_DETAIL = Operation(
    name="kb_get_translate_script_km_contents",
    command="kbUIService.getTranslateScriptKmContents",
    description=(
        "Get one knowledge-base article (command: kbUIService.getTranslateScriptKmContents).\n"
        "Returns the full text and metadata by KB ID."
    ),
    input_model=KbDetailInput,
    build_params=_detail_params,
    normalize=_normalize_detail,
)
