"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from .timestamps import parse_timestamp

EPOCH = datetime(1970, 1, 1)


class Priority(Enum):
    """User-declared task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: "str | Priority | None") -> "Priority | None":
        """Parse a priority label. Unknown or empty labels become None."""
        if value is None or isinstance(value, Priority):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Sort rank: high first, undeclared last
PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2, None: 3}


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class ViewFilter(Enum):
    """Task list tabs."""

    ALL = "all"
    HIGH = "high"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"
    COMPLETED = "completed"


def normalize_tags(tags: Iterable[str] | None) -> frozenset[str]:
    """Lowercase and strip tag labels, dropping empties."""
    if not tags:
        return frozenset()
    return frozenset(t.strip().lower() for t in tags if t and t.strip())


@dataclass(frozen=True)
class Task:
    """A to-do item, optionally annotated by the prioritization oracle."""

    id: str
    title: str
    description: str = ""
    due_date: datetime | None = None
    priority: Priority | None = None
    status: TaskStatus = TaskStatus.PENDING
    completed_at: datetime | None = None
    ai_priority: int | None = None
    ai_reason: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_pending(self) -> bool:
        return self.status is TaskStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def is_due_on(self, day: date) -> bool:
        """True when the due date falls on the given calendar day."""
        return self.due_date is not None and self.due_date.date() == day

    def clear_ai(self) -> "Task":
        """Return a copy without oracle annotations."""
        if self.ai_priority is None and self.ai_reason is None:
            return self
        return replace(self, ai_priority=None, ai_reason=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "priority": self.priority.value if self.priority else None,
            "status": self.status.value,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "aiPriority": self.ai_priority,
            "aiReason": self.ai_reason,
            "tags": sorted(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record."""
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description") or "",
            due_date=parse_timestamp(data.get("dueDate")),
            priority=Priority.parse(data.get("priority")),
            status=TaskStatus(data.get("status", "pending")),
            completed_at=parse_timestamp(data.get("completedAt")),
            ai_priority=data.get("aiPriority"),
            ai_reason=data.get("aiReason"),
            tags=normalize_tags(data.get("tags")),
        )


# ============== Ranking ==============


def task_sort_key(task: Task) -> tuple:
    """
    Sort key implementing the canonical display order.

    Pending before completed. Pending: AI-ranked first (ascending rank), then
    declared priority, then earliest due date (undated last). Completed: most
    recently completed first, undated as if completed at the epoch.
    """
    if task.is_completed:
        completed = task.completed_at or EPOCH
        return (1, -(completed - EPOCH).total_seconds())

    has_ai = task.ai_priority is not None
    no_due = task.due_date is None
    return (
        0,
        0 if has_ai else 1,
        task.ai_priority if has_ai else 0,
        PRIORITY_RANK[task.priority],
        no_due,
        EPOCH if no_due else task.due_date,
    )


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Stable sort by the canonical order.

    Pure function - no I/O.
    """
    return sorted(tasks, key=task_sort_key)


def filter_view(tasks: Iterable[Task], view: ViewFilter, today: date | None = None) -> list[Task]:
    """Keep the tasks shown under a tab, in input order."""
    today = today or date.today()
    match view:
        case ViewFilter.ALL:
            return list(tasks)
        case ViewFilter.HIGH:
            return [t for t in tasks if t.is_pending and t.priority is Priority.HIGH]
        case ViewFilter.DUE_TODAY:
            return [t for t in tasks if t.is_pending and t.is_due_on(today)]
        case ViewFilter.UPCOMING:
            return [
                t for t in tasks if t.is_pending and t.due_date and t.due_date.date() > today
            ]
        case ViewFilter.COMPLETED:
            return [t for t in tasks if t.is_completed]
    raise ValueError(f"Unknown view: {view}")


def rank(tasks: Iterable[Task], view: ViewFilter = ViewFilter.ALL, today: date | None = None) -> list[Task]:
    """
    Filter tasks for a view, then sort them.

    Pure function - no I/O.
    """
    return sort_tasks(filter_view(tasks, view, today))


def merge_ai_result(tasks: Iterable[Task], ai_result: Iterable) -> list[Task]:
    """
    Apply oracle rankings to pending tasks and re-sort the whole collection.

    Matching is by exact title; with duplicate titles the first result wins.
    Pending tasks without a match and all non-pending tasks end up with no
    AI fields. `ai_result` items need `title`, `priority` and `reason`.
    """
    by_title = {}
    for item in ai_result:
        by_title.setdefault(item.title, item)

    merged = []
    for task in tasks:
        hit = by_title.get(task.title) if task.is_pending else None
        if hit is None:
            merged.append(task.clear_ai())
        else:
            merged.append(replace(task, ai_priority=hit.priority, ai_reason=hit.reason))
    return sort_tasks(merged)


# ============== Lifecycle ==============


def _find(tasks: list[Task], task_id: str) -> int:
    for i, t in enumerate(tasks):
        if t.id == task_id:
            return i
    raise KeyError(task_id)


def new_task_id() -> str:
    return uuid.uuid4().hex


def create_task(
    tasks: Iterable[Task],
    title: str,
    description: str = "",
    due_date: datetime | None = None,
    priority: Priority | None = None,
    tags: Iterable[str] | None = None,
    task_id: str | None = None,
) -> list[Task]:
    """Prepend a new pending task and return the re-sorted collection."""
    task = Task(
        id=task_id or new_task_id(),
        title=title.strip(),
        description=description or "",
        due_date=due_date,
        priority=priority,
        tags=normalize_tags(tags),
    )
    return sort_tasks([task, *tasks])


def edit_task(tasks: Iterable[Task], task_id: str, **changes) -> list[Task]:
    """
    Replace editable fields of one task.

    Editable: title, description, due_date, priority, tags. Status and AI
    annotations are left as they are.
    """
    allowed = {"title", "description", "due_date", "priority", "tags"}
    unknown = set(changes) - allowed
    if unknown:
        raise TypeError(f"Cannot edit task fields: {', '.join(sorted(unknown))}")
    if "tags" in changes:
        changes["tags"] = normalize_tags(changes["tags"])
    if "title" in changes:
        changes["title"] = changes["title"].strip()

    result = list(tasks)
    i = _find(result, task_id)
    result[i] = replace(result[i], **changes)
    return sort_tasks(result)


def set_status(task: Task, status: TaskStatus, now: datetime | None = None) -> Task:
    """Move a task to a status. Any change clears the AI annotations."""
    if status is task.status:
        return task
    if status is TaskStatus.COMPLETED:
        return replace(
            task,
            status=status,
            completed_at=now or datetime.now(),
            ai_priority=None,
            ai_reason=None,
        )
    return replace(task, status=status, completed_at=None, ai_priority=None, ai_reason=None)


def toggle_complete(tasks: Iterable[Task], task_id: str, now: datetime | None = None) -> list[Task]:
    """Flip one task between pending and completed."""
    result = list(tasks)
    i = _find(result, task_id)
    task = result[i]
    target = TaskStatus.PENDING if task.is_completed else TaskStatus.COMPLETED
    result[i] = set_status(task, target, now)
    return sort_tasks(result)


def delete_task(tasks: Iterable[Task], task_id: str) -> list[Task]:
    """Remove one task."""
    result = list(tasks)
    del result[_find(result, task_id)]
    return result
