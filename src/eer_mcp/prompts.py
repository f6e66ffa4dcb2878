"""Prompt catalog: canned instructions that steer an MCP client through the tools.

Prompts are plain text.  They never call tools themselves; the client reads the
text and issues the tool calls it describes, one at a time.

Each ``*_prompt`` function takes the prompt arguments and returns the message
text.  An optional ``today`` argument pins the reference date for tests.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

WORKFLOWS = ("history", "technical", "comprehensive", "quick")
DEPTHS = ("shallow", "normal", "deep")

DEFAULT_WORKFLOW = "comprehensive"
DEFAULT_DEPTH = "normal"


# ---------------------------------------------------------------------------
# Date helpers
# ---------------------------------------------------------------------------


def format_date(day: date) -> str:
    """Format *day* as ``YYYYMMDD``."""
    return day.strftime("%Y%m%d")


def readable_date(value: str) -> str:
    """Turn ``YYYYMMDD`` into ``YYYY-MM-DD``; other input is returned unchanged."""
    if len(value) != 8:
        return value
    return f"{value[:4]}-{value[4:6]}-{value[6:]}"


def days_ago(days: int, today: Optional[date] = None) -> str:
    today = today or date.today()
    return format_date(today - timedelta(days=days))


# ---------------------------------------------------------------------------
# search_tickets / analyze_tickets / daily_ticket_report / inquire_ticket
# ---------------------------------------------------------------------------


def search_tickets_prompt(query: str, today: Optional[date] = None) -> str:
    today_str = days_ago(0, today)
    yesterday = days_ago(1, today)
    week_ago = days_ago(7, today)
    return f"""The user wants to search tickets with this request:

"{query}"

Today: {today_str}
Yesterday: {yesterday}
A week ago: {week_ago}

Use the ticket_select_list tool to find the tickets matching this request.

Notes:
- Date format: YYYYMMDDHHMMSS (e.g. 20260219000000)
- "today" is {today_str}000000 ~ {today_str}235959
- "yesterday" is {yesterday}000000 ~ {yesterday}235959
- "last week" is {week_ago}000000 ~ {today_str}235959
- ticketStatus: ALL (all), OPEN (unfinished), CLOSED (finished), ANSWER_ING (being answered)
- Customer name, email and phone number can also be used as filters

Summarize the results so the user can read them at a glance."""


def analyze_tickets_prompt(period: str, focus: Optional[str] = None, today: Optional[date] = None) -> str:
    focus_text = f'\nPay particular attention to "{focus}".' if focus else ""
    return f"""Analyze the ticket data for the period "{period}".{focus_text}

Today: {days_ago(0, today)}
A week ago: {days_ago(7, today)}
A month ago: {days_ago(30, today)}

## Analysis steps

### Step 1: ticket list
- Use ticket_select_list to fetch every ticket in the period
- Collect the basic statistics:
  - total tickets and distribution by status (OPEN, CLOSED, ANSWER_ING, ...)
  - common inquiry types (patterns in questionTitle)
  - inquiry frequency per customer
  - workload per assignee

### Step 2: detailed analysis of important tickets
Pick the important tickets: unfinished (OPEN) ones, ones that took long,
tickets from repeat customers and tickets related to the focus.

For each important ticket use all of the following tools:

1. **Ticket detail**
   - Tool: qna_select_qna_form
   - Parameter: ticketId

2. **Task logs** (when the ticket has a taskId)
   - Tool: task_select_task_log_list
   - Parameter: taskId
   - Look at: progress of the work, time spent, assignee activity

3. **Group tickets**
   - Tool: qna_select_group_ticket_list
   - Parameter: ticketId
   - Look at: related tickets, repeated inquiries

4. **Related knowledge**
   - Tools: kb_select_node_id, then kb_select_search_kb_list
   - Parameter: keywords taken from the ticket content
   - Look at: known solutions, similar cases, reusable KB articles

### Step 3: report

#### Overview
- Period: {period}
- Total tickets:
- Distribution by status:
- Key statistics:

#### Important tickets
For each important ticket:
- ticket ID and title
- current status and progress
- task log summary (if any)
- related tickets and repeated inquiries
- usable KB articles
- recommended actions

---
**Important**: use all four tools for every important ticket."""


def daily_ticket_report_prompt(day: Optional[str] = None, today: Optional[date] = None) -> str:
    target = day or days_ago(0, today)
    return f"""Write the daily ticket report for {target}.

Use ticket_select_list for the period {target}000000 ~ {target}235959
and write a report with the following sections:

# Daily ticket report ({readable_date(target)})

## Overview
- Tickets received
- Distribution by status (unfinished / in progress / finished)
- Change from the previous day (if available)

## Customers
- New customers (first inquiry)
- Returning customers
- VIP customer inquiries (if any)

## Main issues
- Top three inquiry types
- Tickets needing urgent handling
- Unanswered tickets

## Assignees
- Tickets handled per assignee
- Average response time (if the data allows)

## Observations and suggestions
- Notable patterns or anomalies
- Suggested improvements

Keep the report short and easy to read."""


def inquire_ticket_prompt(ticket_id: str) -> str:
    return f"""Collect and analyze everything about ticket "{ticket_id}".

Run these steps in order:

## Step 1: ticket detail
- Tool: qna_select_qna_form
- Parameter: ticketId = "{ticket_id}"
- Collect: title, customer, inquiry content, processing history, linked taskId

## Step 2: task logs (when a taskId exists)
- Take the taskId from the step 1 response
- Tool: task_select_task_log_list
- Parameter: taskId = (taskId from step 1)
- Collect: work log entries, time spent, assignees

## Step 3: group tickets
- Tool: qna_select_group_ticket_list
- Parameter: ticketId = "{ticket_id}"
- Collect: related tickets, linked inquiries

## Step 4: related knowledge
- Extract keywords from the title and content found in step 1
- Tools: kb_select_node_id, kb_select_search_kb_list, kb_get_translate_script_km_contents
- Parameters: searchId = (keywords), page = 1, rows = 5
- Collect: related KB articles, similar cases

## Response
- Keep it concise.

---

**Notes:**
- If a tool call fails, continue with the next step
- Skip step 2 when there is no taskId
- Use meaningful keywords from the ticket for the knowledge search
- Structure the final answer so the user can follow it easily"""


# ---------------------------------------------------------------------------
# ticket_workflow
# ---------------------------------------------------------------------------


def _ticket_detail_block(ticket_id: str) -> str:
    return f"""### Ticket detail
```
Tool: qna_select_qna_form
Parameter: ticketId = "{ticket_id}"
```
**Collect:**
- title, content, customer
- inquiry type and keywords
- linked taskId (if any)
- processing history (processHistory)"""


def _task_log_block(task_id: str) -> str:
    return f"""### Task logs
```
Tool: task_select_task_log_list
Parameter: taskId = {task_id}
```
**Look at:**
- the work log contents"""


def _group_tickets_block(ticket_id: str) -> str:
    return f"""### Group tickets
```
Tool: qna_select_group_ticket_list
Parameter: ticketId = "{ticket_id}"
```
**Collect:**
- related tickets in the same group"""


def _site_links_block() -> str:
    return """### Site links
```
Tool: qna_select_site_conn_link_list
Parameter: siteId = (customer.id from the ticket detail)
```
**Purpose:**
- understand the customer's site environment"""


def _similar_tickets_block(rows: int, period: str = "(last 3 months)") -> str:
    return f"""### Similar tickets
```
Tool: ticket_select_list
Parameters:
  - questionTitle = (key words extracted from the ticket)
  - ticketStatus = "ALL"
  - startDate = {period}
  - endDate = (now)
  - rows = {rows}
```
**Purpose:** find similar past tickets"""


def _similar_ticket_details_block(count: int) -> str:
    return f"""### Similar ticket details
```
For the top {count} similar tickets:
Tool: qna_select_qna_form
Parameter: ticketId = (each similar ticket ID)
```
**Look at:** solution, handling process, outcome"""


def _ticket_summary_report(ticket_id: str) -> str:
    return f"""### Ticket overview
- Ticket ID: {ticket_id}
- Title and main content
- Customer and status
- Received at"""


def _history_report(count: int) -> str:
    return f"""### History analysis
- {count} similar tickets examined
- **Patterns:**
  - recurring problems
  - solutions that worked
  - attempts to avoid"""


RECOMMENDATIONS_REPORT = """### Recommended actions
1. (first choice)
2. (alternative 1)
3. (alternative 2)

### Immediate next steps
1. (priority 1)
2. (priority 2)
3. (priority 3)"""

TECHNICAL_REPORT = """### Technical problem
- problem type and keywords
- impact

### Step-by-step guide
1. [Step 1] (what to do)
2. [Step 2] (next action)
3. [Step 3] (how to verify)"""


def history_workflow(ticket_id: str, depth: str) -> str:
    rows = {"deep": 20, "normal": 10}.get(depth, 5)
    detail_count = 3 if depth == "shallow" else 5
    steps = [
        "## Step 1",
        _ticket_detail_block(ticket_id),
        "## Step 2",
        _group_tickets_block(ticket_id),
        "## Step 3",
        _similar_tickets_block(rows),
        "## Step 4",
        _similar_ticket_details_block(detail_count),
        "## Step 5",
        _task_log_block("(taskId of each similar ticket)"),
        "**Look at:** how past problems were solved, time spent, what worked and what failed",
        "## Step 6",
        _task_log_block("(taskId from step 1)"),
    ]
    report = [
        _ticket_summary_report(ticket_id),
        _history_report(rows),
        "### Case details\nFor each case:\n- ticket ID and date\n- the problem and how it was solved",
        RECOMMENDATIONS_REPORT,
    ]
    return (
        f'Run a **history analysis** for ticket "{ticket_id}".\n\n'
        "## Workflow: HISTORY\n\n"
        "Find similar past cases and study them in depth.\n\n"
        + "\n".join(steps)
        + "\n\n---\n\n## Final report\n\n"
        + "\n".join(report)
        + "\n\n---\n**Workflow complete:** all steps called and analyzed"
    )


def technical_workflow(ticket_id: str, depth: str) -> str:
    rows = 15 if depth == "deep" else 5
    steps = [
        "## Step 1",
        _ticket_detail_block(ticket_id),
        "## Step 2",
        _group_tickets_block(ticket_id),
        "**Extract keywords:** keywords, error messages, product names",
        "## Step 3",
        _site_links_block(),
        "## Step 4",
        _similar_tickets_block(rows, "(last 6 months)"),
        "## Step 5",
        "If the client has a code workspace, analyze the related code there",
    ]
    return (
        f'Run a **technical analysis** for ticket "{ticket_id}".\n\n'
        "## Workflow: TECHNICAL\n\n"
        "Focus on KB articles and technical solutions.\n\n"
        + "\n".join(steps)
        + "\n\n---\n\n## Final technical report\n\n"
        + _ticket_summary_report(ticket_id)
        + "\n\n"
        + TECHNICAL_REPORT
        + "\n\n### Similar cases\n- similar technical issues solved before\n- solution and result"
        + "\n\n---\n\n**Workflow complete:** technical solution provided"
    )


def comprehensive_workflow(ticket_id: str, depth: str) -> str:
    rows = {"deep": 15, "normal": 10}.get(depth, 5)
    detail_count = 5 if depth == "deep" else 3
    phase1 = [
        "### Phase 1: basic information",
        "#### 1-1",
        _ticket_detail_block(ticket_id),
        "#### 1-2",
        _group_tickets_block(ticket_id),
        "#### 1-3",
        _site_links_block(),
    ]
    phase2 = [
        "### Phase 2: history",
        "#### 2-1",
        _similar_tickets_block(rows),
        "#### 2-2",
        _similar_ticket_details_block(detail_count),
    ]
    phase3 = [
        "### Phase 3: work progress",
        "#### 3-1",
        _task_log_block("(taskId from 1-1, if any)"),
        "#### 3-2",
        _task_log_block("(taskId of the tickets from 2-2)"),
    ]
    return f"""Run a **comprehensive analysis** for ticket "{ticket_id}".

## Workflow: COMPREHENSIVE

Cover every aspect in balance.

{chr(10).join(phase1)}

{chr(10).join(phase2)}

{chr(10).join(phase3)}

---

## Final report

### Executive summary
- ticket overview and core issue
- current status
- recommended action (three lines)

### Details

#### A. Ticket
{_ticket_summary_report(ticket_id)}

#### B. History
{_history_report(rows)}

#### C. Technical solution
{TECHNICAL_REPORT}

#### D. Related information
- group tickets, related sites, other references

### Recommendations

#### Now
1. (top priority)
2. (urgent)

#### Short term (1-3 days)
1. (planned action)

#### Long term
1. (improvement and prevention)

### Risk assessment
- complexity, urgency, expected difficulty

---
**Workflow complete:** all phases done"""


def quick_workflow(ticket_id: str) -> str:
    steps = [
        "## Step 1",
        _ticket_detail_block(ticket_id),
        "## Step 2",
        _group_tickets_block(ticket_id),
        "## Step 3",
        _task_log_block("(taskId from step 1, only if present)"),
    ]
    return f"""Run a **quick lookup** for ticket "{ticket_id}".

## Workflow: QUICK

Check only the essentials.

{chr(10).join(steps)}

---

## Short report

### Basics
- Ticket ID: {ticket_id}
- title and status
- customer

### Inquiry
(three-line summary)

### Status
- received date and progress
- number of related tickets

### Next action
(one-line recommendation)

---
**Workflow complete:** basic information provided"""


def ticket_workflow_prompt(
    ticket_id: str,
    workflow: str = DEFAULT_WORKFLOW,
    depth: str = DEFAULT_DEPTH,
) -> str:
    """Build the workflow text for *ticket_id*.

    Raises
    ------
    ValueError
        If *workflow* or *depth* is not one of the known values.
    """
    workflow = workflow or DEFAULT_WORKFLOW
    depth = depth or DEFAULT_DEPTH
    if workflow not in WORKFLOWS:
        raise ValueError(f"Unknown workflow '{workflow}'. Choose one of: {', '.join(WORKFLOWS)}")
    if depth not in DEPTHS:
        raise ValueError(f"Unknown depth '{depth}'. Choose one of: {', '.join(DEPTHS)}")

    if workflow == "history":
        return history_workflow(ticket_id, depth)
    if workflow == "technical":
        return technical_workflow(ticket_id, depth)
    if workflow == "quick":
        return quick_workflow(ticket_id)
    return comprehensive_workflow(ticket_id, depth)
