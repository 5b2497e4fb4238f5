"""Prioritization oracle contract - request building and response parsing.

The oracle itself (an LLM) lives behind the PrioritizationOracle port. This
module only shapes what goes in and checks what comes back.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from .tasks import Priority, Task

DEFAULT_DEADLINE_DAYS = 7
IMPORTANCE_LEVELS = ("low", "medium", "high")


class OracleRequestFailed(Exception):
    """Raised when the oracle call fails or returns unusable data."""

    pass


@dataclass(frozen=True)
class OracleTask:
    """One task as sent to the oracle."""

    title: str
    description: str
    deadline: str  # YYYY-MM-DD
    importance: str  # low | medium | high

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline,
            "importance": self.importance,
        }


@dataclass(frozen=True)
class PrioritizedTask:
    """One ranked task as returned by the oracle. Priority 1 is the top."""

    title: str
    priority: int
    reason: str
    description: str = ""
    deadline: str = ""
    importance: str = "medium"


def build_oracle_request(
    tasks: Iterable[Task],
    today: date | None = None,
    default_deadline_days: int = DEFAULT_DEADLINE_DAYS,
) -> list[OracleTask]:
    """
    Build the oracle request from the pending tasks, in collection order.

    Missing due dates default to `default_deadline_days` out; missing
    priorities go out as "medium".
    """
    today = today or date.today()
    fallback = (today + timedelta(days=default_deadline_days)).isoformat()
    request = []
    for task in tasks:
        if not task.is_pending:
            continue
        priority = Priority.parse(task.priority)
        request.append(
            OracleTask(
                title=task.title,
                description=task.description or "",
                deadline=task.due_date.date().isoformat() if task.due_date else fallback,
                importance=priority.value if priority else Priority.MEDIUM.value,
            )
        )
    return request


def parse_oracle_response(payload) -> list[PrioritizedTask]:
    """
    Validate a decoded oracle response.

    Accepts either a bare list of ranked tasks or an object with a
    `prioritizedTasks` list. Raises OracleRequestFailed on anything else,
    including an empty result.
    """
    if isinstance(payload, dict):
        payload = payload.get("prioritizedTasks")
    if not isinstance(payload, list):
        raise OracleRequestFailed("Oracle response is not a list of tasks")
    if not payload:
        raise OracleRequestFailed("Oracle returned no tasks")

    results = []
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise OracleRequestFailed(f"Oracle item {i} is not an object")
        title = item.get("title")
        priority = item.get("priority")
        reason = item.get("reason", "")
        if not isinstance(title, str) or not title:
            raise OracleRequestFailed(f"Oracle item {i} has no title")
        priority = _parse_rank(priority, i)
        if not isinstance(reason, str):
            raise OracleRequestFailed(f"Oracle item {i} has a non-text reason")
        importance = item.get("importance")
        results.append(
            PrioritizedTask(
                title=title,
                priority=priority,
                reason=reason,
                description=item.get("description") or "",
                deadline=item.get("deadline") or "",
                importance=importance if importance in IMPORTANCE_LEVELS else "medium",
            )
        )
    return results


def _parse_rank(value, index: int) -> int:
    """Accept whole-number ranks from 1 up; 2.0 becomes 2."""
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OracleRequestFailed(f"Oracle item {index} has a non-numeric priority")
    if not math.isfinite(value) or value != int(value) or value < 1:
        raise OracleRequestFailed(f"Oracle item {index} has an invalid priority: {value!r}")
    return int(value)
