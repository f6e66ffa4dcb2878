"""Task log operation (``taskUIService.selectTaskLogList``)."""

from __future__ import annotations

from typing import Any, Mapping, Union

from eer_mcp.errors import NotFoundError
from eer_mcp.models.requests import TaskLogListInput
from eer_mcp.models.summaries import TaskLogEntry, TaskLogListSummary
from eer_mcp.operations.base import (
    Operation,
    ajax_or_process_succeeded,
    as_mapping,
    count,
    first_truthy,
    list_field,
)

NO_TASK_LOGS = "No task logs found."


def _params(request: TaskLogListInput) -> dict:
    return {"taskId": request.task_id}


def _normalize(reply: Mapping[str, Any], request: TaskLogListInput) -> Union[TaskLogListSummary, str]:
    items = list_field(reply, "taskLogList")
    if items is None:
        raise NotFoundError(f"The task log reply for {request.task_id} has no taskLogList.")
    # An empty log is a normal state for a fresh task, not a failure.
    if not items:
        return NO_TASK_LOGS

    logs = []
    for raw in items:
        log = as_mapping(raw)
        logs.append(
            TaskLogEntry(
                log_id=log.get("logId"),
                task_id=log.get("taskId"),
                log_status=log.get("logStatus"),
                log_time=log.get("logTime"),
                contents=log.get("taskLogContents"),
                created_by=first_truthy(log.get("createdName"), log.get("createdBy")),
                created_date=log.get("createdDate"),
                updated_by=first_truthy(log.get("updatedName"), log.get("updatedBy")),
                updated_date=log.get("updatedDate"),
                attachment_count=count(log.get("attachList")),
            )
        )

    return TaskLogListSummary(task_id=request.task_id, total_logs=len(logs), logs=logs)


TASK_LOG_LIST = Operation(
    name="task_select_task_log_list",
    command="taskUIService.selectTaskLogList",
    description=(
        "List the work logs of a task (command: taskUIService.selectTaskLogList).\n"
        "Returns every log entry recorded for the given task ID."
    ),
    input_model=TaskLogListInput,
    build_params=_params,
    normalize=_normalize,
    succeeded=ajax_or_process_succeeded,
    failure_message="Failed to retrieve task logs",
)
