"""Workspace storage interface."""

from typing import Protocol

from prohub.core.notes import Note
from prohub.core.tasks import Task
from prohub.core.trades import Trade


class WorkspaceStore(Protocol):
    """Interface for loading and saving the task, trade and note collections."""

    def load_tasks(self) -> list[Task]:
        ...

    def save_tasks(self, tasks: list[Task]) -> None:
        ...

    def load_trades(self) -> list[Trade]:
        ...

    def save_trades(self, trades: list[Trade]) -> None:
        ...

    def load_notes(self) -> list[Note]:
        ...

    def save_notes(self, notes: list[Note]) -> None:
        ...
