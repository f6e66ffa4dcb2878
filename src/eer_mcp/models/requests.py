"""Input contracts for the operation catalog.

Each model validates the arguments of one tool before any backend request is
made.  Field names are snake_case in Python and camelCase on the wire (the
names MCP callers use), via the ``to_camel`` alias generator.

Defaults matter: they are forwarded to the backend verbatim, so changing one
changes the backend query.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TIMESTAMP_FORMAT = "YYYYMMDDHHMMSS, e.g. 20260219000000"

Timestamp = Annotated[
    str,
    Field(pattern=r"^\d{14}$", description=TIMESTAMP_FORMAT),
]
TicketId = Annotated[
    str,
    Field(pattern=r"^TCKT\d{10}$", description="TCKT + 10 digits, e.g. TCKT0000177000"),
]
KbId = Annotated[
    str,
    Field(pattern=r"^KNOW\d{10}$", description="KNOW + 10 digits, e.g. KNOW0000005091"),
]
Page = Annotated[int, Field(ge=1, description="page number >= 1")]
Rows = Annotated[int, Field(ge=1, le=100, description="rows per page between 1 and 100")]


class TicketStatus(str, Enum):
    """Ticket status filter values accepted by the ticket list."""

    ALL = "ALL"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"
    ANSWER_ING = "ANSWER_ING"


class DateType(str, Enum):
    """Column the ticket list date range applies to."""

    CONNECT_DATE = "connect_date"
    END_DATE = "end_date"
    CREATE_DATE = "create_date"


class OperationInput(BaseModel):
    """Base for all tool inputs."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TicketListInput(OperationInput):
    start_date: Timestamp
    end_date: Timestamp
    page: Page = 1
    rows: Rows = 20
    date_type: DateType = DateType.CONNECT_DATE
    ticket_status: TicketStatus = TicketStatus.ALL

    customer_name: str = ""
    customer_id: str = ""
    customer_email: str = ""
    customer_tel: str = ""
    customer_no: str = ""

    question_title: str = ""
    search_ticket_id: str = ""
    search_contents: str = ""

    account_id: str = ""
    node_id: str = ""


class TicketDetailInput(OperationInput):
    ticket_id: TicketId
    include_contents: bool = False


class GroupTicketListInput(OperationInput):
    ticket_id: TicketId
    service_type: str = "SVQNA"
    page: Page = 1
    rows: Rows = 10


class SiteLinkListInput(OperationInput):
    site_id: str = Field(description="customer site ID (the ticket's customerId)")


class KbNodeLookupInput(OperationInput):
    alias: str = Field(description="customer ID (the ticket's customerId)")
    customer_no: str = Field(description="customer company (the ticket's customerNo)")
    more_flag: bool = False


class KbSearchInput(OperationInput):
    start_date: Timestamp
    end_date: Timestamp
    alias: str = Field(description="customer ID (the ticket's customerId)")
    node_id: str = Field(description="KB node ID, e.g. NODE0000000456")
    kb_id: str = ""
    search_id: str = ""
    page: Page = 1
    rows: Rows = 10


class KbDetailInput(OperationInput):
    kb_id: KbId
    node_id: str = ""
    service_type: str = "SVKNW"
    include_contents: bool = True


class TaskLogListInput(OperationInput):
    task_id: str = Field(min_length=1, description="task ID, e.g. TASK0000012098")


class SessionUpdateInput(OperationInput):
    session_id: str = Field(min_length=1, description="new JSESSIONID value")
    save_to_file: bool = True

    @field_validator("session_id")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("session ID must not be blank")
        return value.strip()
