"""Tests for the JSON workspace store."""

from datetime import datetime

import pytest

from prohub.adapters.json_workspace import JsonWorkspaceStore
from prohub.core.notes import Active, Note
from prohub.core.tasks import Priority, Task
from prohub.core.trades import Position, Trade


@pytest.fixture
def store(tmp_path):
    return JsonWorkspaceStore(tmp_path / "data" / "workspace.json")


class TestJsonWorkspaceStore:
    def test_missing_file_is_empty(self, store):
        assert store.load_tasks() == []
        assert store.load_trades() == []
        assert store.load_notes() == []

    def test_tasks_round_trip(self, store):
        tasks = [Task(id="1", title="A", priority=Priority.HIGH, due_date=datetime(2025, 1, 20, 9))]
        store.save_tasks(tasks)
        assert store.load_tasks() == tasks

    def test_sections_are_independent(self, store):
        now = datetime(2025, 1, 15, 12)
        store.save_tasks([Task(id="1", title="A")])
        store.save_trades(
            [
                Trade(
                    id="t1",
                    asset="AAPL",
                    position=Position.LONG,
                    entry_timestamp=now,
                    entry_price=100,
                    quantity=1,
                )
            ]
        )
        store.save_notes(
            [Note(id="n1", title="N", content="c", created_at=now, updated_at=now, state=Active(True))]
        )

        assert [t.id for t in store.load_tasks()] == ["1"]
        assert [t.id for t in store.load_trades()] == ["t1"]
        assert store.load_notes()[0].is_starred

    def test_no_temp_file_left(self, store):
        store.save_tasks([Task(id="1", title="A")])
        assert sorted(p.name for p in store.path.parent.iterdir()) == ["workspace.json"]

    def test_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        with pytest.raises(ValueError, match="Corrupt"):
            store.load_tasks()

    def test_expands_user_path(self):
        store = JsonWorkspaceStore("~/ws.json")
        assert "~" not in str(store.path)
