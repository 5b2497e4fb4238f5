"""Record-boundary validation for tasks, trades and notes.

The aggregation and ranking functions trust their input; anything built from
user input passes through here first.
"""

from .notes import Note
from .tasks import Task
from .trades import Trade

MAX_NOTE_TITLE = 100
MAX_NOTE_CONTENT = 10000


class ValidationError(ValueError):
    """Raised when a record fails validation. Carries every problem found."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def validate_task(task: Task) -> Task:
    if not task.title.strip():
        raise ValidationError(["Title is required."])
    return task


def validate_trade(trade: Trade) -> Trade:
    """Check prices, quantity, risk and the exit fields of a trade."""
    errors = []
    if not trade.asset.strip():
        errors.append("Asset name is required.")
    if trade.entry_price <= 0:
        errors.append("Entry price must be positive.")
    if trade.quantity <= 0:
        errors.append("Quantity must be positive.")
    if trade.exit_price is not None and trade.exit_price <= 0:
        errors.append("Exit price must be positive.")
    if trade.risk_percentage is not None and not 0 <= trade.risk_percentage <= 100:
        errors.append("Risk percentage must be between 0 and 100.")

    has_price = trade.exit_price is not None
    has_time = trade.exit_timestamp is not None
    if has_price != has_time:
        errors.append("Exit price and exit date must be given together.")
    elif has_time and trade.exit_timestamp < trade.entry_timestamp:
        errors.append("Exit date cannot be before entry.")
    if trade.is_closed and not (has_price and has_time):
        errors.append("A closed trade needs an exit price and exit date.")
    if not trade.is_closed and has_price and has_time:
        errors.append("A trade with an exit must be closed.")

    if errors:
        raise ValidationError(errors)
    return trade


def validate_note(note: Note) -> Note:
    errors = []
    if not note.title.strip():
        errors.append("Title is required.")
    if len(note.title) > MAX_NOTE_TITLE:
        errors.append(f"Title cannot exceed {MAX_NOTE_TITLE} characters.")
    if len(note.content) > MAX_NOTE_CONTENT:
        errors.append(f"Content cannot exceed {MAX_NOTE_CONTENT} characters.")
    if errors:
        raise ValidationError(errors)
    return note
