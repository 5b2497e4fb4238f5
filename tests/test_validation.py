"""Tests for record-boundary validation."""

from datetime import datetime

import pytest

from prohub.core.notes import Note
from prohub.core.tasks import Task
from prohub.core.trades import Position, Trade, TradeStatus
from prohub.core.validation import ValidationError, validate_note, validate_task, validate_trade


def make_trade(**overrides) -> Trade:
    fields = dict(
        id="t1",
        asset="AAPL",
        position=Position.LONG,
        entry_timestamp=datetime(2025, 1, 10, 9, 30),
        entry_price=100.0,
        quantity=5.0,
    )
    fields.update(overrides)
    return Trade(**fields)


class TestValidateTask:
    def test_valid(self):
        task = Task(id="1", title="A")
        assert validate_task(task) is task

    def test_blank_title(self):
        with pytest.raises(ValidationError, match="Title is required"):
            validate_task(Task(id="1", title="   "))


class TestValidateTrade:
    def test_valid_open(self):
        trade = make_trade()
        assert validate_trade(trade) is trade

    def test_valid_closed(self):
        validate_trade(
            make_trade(exit_price=110.0, exit_timestamp=datetime(2025, 1, 11), status=TradeStatus.CLOSED)
        )

    def test_non_positive_numbers(self):
        with pytest.raises(ValidationError) as exc:
            validate_trade(make_trade(entry_price=0, quantity=-1))
        assert "Entry price must be positive." in exc.value.errors
        assert "Quantity must be positive." in exc.value.errors

    def test_exit_price_without_timestamp(self):
        with pytest.raises(ValidationError, match="together"):
            validate_trade(make_trade(exit_price=110.0))

    def test_exit_before_entry(self):
        with pytest.raises(ValidationError, match="before entry"):
            validate_trade(
                make_trade(exit_price=110.0, exit_timestamp=datetime(2025, 1, 9), status=TradeStatus.CLOSED)
            )

    def test_closed_needs_exit(self):
        with pytest.raises(ValidationError, match="closed trade"):
            validate_trade(make_trade(status=TradeStatus.CLOSED))

    def test_exit_requires_closed_status(self):
        with pytest.raises(ValidationError, match="must be closed"):
            validate_trade(make_trade(exit_price=110.0, exit_timestamp=datetime(2025, 1, 11)))

    def test_risk_range(self):
        with pytest.raises(ValidationError, match="Risk"):
            validate_trade(make_trade(risk_percentage=150))

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_trade(make_trade(asset=""))


class TestValidateNote:
    def make(self, title="A", content=""):
        now = datetime(2025, 1, 15)
        return Note(id="1", title=title, content=content, created_at=now, updated_at=now)

    def test_valid(self):
        validate_note(self.make())

    def test_title_too_long(self):
        with pytest.raises(ValidationError, match="100"):
            validate_note(self.make(title="x" * 101))

    def test_content_too_long(self):
        with pytest.raises(ValidationError, match="10000"):
            validate_note(self.make(content="x" * 10001))
