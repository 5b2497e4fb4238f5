"""JSON file workspace storage adapter."""

import json
import logging
from pathlib import Path

from prohub.core.notes import Note
from prohub.core.tasks import Task
from prohub.core.trades import Trade

logger = logging.getLogger(__name__)


class JsonWorkspaceStore:
    """
    Single-file JSON workspace.

    Implements WorkspaceStore protocol. The file holds three lists keyed
    "tasks", "trades" and "notes"; a missing file is an empty workspace.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt workspace file {self.path}: {e}")
            raise ValueError(f"Corrupt workspace file {self.path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Corrupt workspace file {self.path}: expected an object")
        return data

    def _write_section(self, key: str, records: list[dict]) -> None:
        data = self._read()
        data[key] = records
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2))
        tmp.replace(self.path)

    def load_tasks(self) -> list[Task]:
        return [Task.from_dict(d) for d in self._read().get("tasks", [])]

    def save_tasks(self, tasks: list[Task]) -> None:
        self._write_section("tasks", [t.to_dict() for t in tasks])

    def load_trades(self) -> list[Trade]:
        return [Trade.from_dict(d) for d in self._read().get("trades", [])]

    def save_trades(self, trades: list[Trade]) -> None:
        self._write_section("trades", [t.to_dict() for t in trades])

    def load_notes(self) -> list[Note]:
        return [Note.from_dict(d) for d in self._read().get("notes", [])]

    def save_notes(self, notes: list[Note]) -> None:
        self._write_section("notes", [n.to_dict() for n in notes])
