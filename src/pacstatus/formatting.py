from datetime import datetime, timezone
from typing import List, Optional

import humanize
import pydantic
from tabulate import tabulate

_ICONS = {
    "Succeeded": ":white_check_mark:",
    "Completed": ":white_check_mark:",
    "Failed": ":x:",
    "PipelineRunTimeout": ":hourglass:",
    "TaskRunTimeout": ":hourglass:",
    "TaskRunCancelled": ":no_entry_sign:",
    "Cancelled": ":no_entry_sign:",
    "Running": ":yellow_circle:",
    "Pending": ":yellow_circle:",
}


class TaskRun(pydantic.BaseModel):
    name: str
    reason: str = "Pending"
    start_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None
    console_log_url: Optional[str] = None

    def __str__(self):
        if self.console_log_url is None:
            return self.name
        return f"[{self.name}]({self.console_log_url})"


def format_condition(reason: str) -> str:
    icon = _ICONS.get(reason, ":white_circle:")
    return f"{icon} {reason}"


def format_duration(
    start: Optional[datetime],
    end: Optional[datetime],
    now: Optional[datetime] = None,
) -> str:
    if start is None:
        return ""
    if end is None:
        now = now or datetime.now(timezone.utc)
        return "running for " + humanize.naturaldelta(now - start)
    return humanize.naturaldelta(end - start)


def render_task_status(
    task_runs: List[TaskRun], now: Optional[datetime] = None
) -> str:
    """Render one markdown table row per task run, ordered by start time."""
    ordered = sorted(
        task_runs,
        key=lambda tr: (tr.start_time is None, tr.start_time or datetime.min, tr.name),
    )
    rows = [
        (
            format_condition(tr.reason),
            format_duration(tr.start_time, tr.completion_time, now=now),
            str(tr),
        )
        for tr in ordered
    ]
    return tabulate(rows, headers=("Status", "Duration", "Name"), tablefmt="github")
