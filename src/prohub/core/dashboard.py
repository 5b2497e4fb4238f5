"""Pure dashboard assembly - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date

from .notes import FILTER_STARRED, Note, filter_notes
from .tasks import Task, ViewFilter, rank
from .trades import SummaryStats, Trade, WeeklyInsights, summarize, weekly_insights


@dataclass
class DashboardData:
    """Everything the overview screen shows."""

    date: date
    pending_count: int
    due_today_count: int
    completed_count: int
    top_tasks: list[Task]
    trade_stats: SummaryStats
    week: WeeklyInsights
    starred_notes: list[Note]


def assemble_dashboard(
    tasks: list[Task],
    trades: list[Trade],
    notes: list[Note],
    today: date | None = None,
    top_n: int = 3,
) -> DashboardData:
    """
    Assemble the overview from the three collections.

    Pure function - no I/O.
    """
    today = today or date.today()
    ranked = rank(tasks, ViewFilter.ALL, today)
    pending = [t for t in ranked if t.is_pending]

    return DashboardData(
        date=today,
        pending_count=len(pending),
        due_today_count=len(rank(tasks, ViewFilter.DUE_TODAY, today)),
        completed_count=len(ranked) - len(pending),
        top_tasks=pending[:top_n],
        trade_stats=summarize(trades),
        week=weekly_insights(trades, today),
        starred_notes=filter_notes(notes, FILTER_STARRED),
    )
