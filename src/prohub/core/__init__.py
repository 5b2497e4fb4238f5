"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Priority,
    Task,
    TaskStatus,
    ViewFilter,
    create_task,
    edit_task,
    merge_ai_result,
    rank,
    sort_tasks,
    toggle_complete,
)
from .prioritization import (
    OracleRequestFailed,
    OracleTask,
    PrioritizedTask,
    build_oracle_request,
    parse_oracle_response,
)
from .trades import Position, SummaryStats, Trade, TradeStatus, WeeklyInsights, summarize, weekly_insights
from .notes import Active, Archived, Note, Trashed, filter_notes, list_tags
from .timer import TimerMode, TimerState
from .validation import ValidationError

__all__ = [
    # Tasks
    "Priority",
    "Task",
    "TaskStatus",
    "ViewFilter",
    "create_task",
    "edit_task",
    "merge_ai_result",
    "rank",
    "sort_tasks",
    "toggle_complete",
    # Prioritization
    "OracleRequestFailed",
    "OracleTask",
    "PrioritizedTask",
    "build_oracle_request",
    "parse_oracle_response",
    # Trades
    "Position",
    "SummaryStats",
    "Trade",
    "TradeStatus",
    "WeeklyInsights",
    "summarize",
    "weekly_insights",
    # Notes
    "Active",
    "Archived",
    "Note",
    "Trashed",
    "filter_notes",
    "list_tags",
    # Timer
    "TimerMode",
    "TimerState",
    # Validation
    "ValidationError",
]
