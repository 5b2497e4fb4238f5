"""Shared workflow layer between the CLI and the core.

Each workflow loads a collection from the store, runs a pure core transform
and saves the result.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, TypeVar

from .adapters.claude_cli import ClaudeCLIService
from .adapters.http_llm import HTTPLLMService
from .adapters.json_workspace import JsonWorkspaceStore
from .adapters.llm_oracle import LLMPrioritizationOracle
from .config import PROHUB_HOME, Config
from .core import notes as notes_core
from .core import tasks as tasks_core
from .core.notes import Note
from .core.prioritization import DEFAULT_DEADLINE_DAYS, build_oracle_request
from .core.tasks import Priority, Task
from .core.trades import Position, Trade, TradeStatus, close_trade, edit_trade
from .core.validation import validate_note, validate_task, validate_trade
from .ports.llm_service import LLMService
from .ports.prioritization_oracle import PrioritizationOracle
from .ports.workspace_store import WorkspaceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PrioritizationInProgress(RuntimeError):
    """Raised when prioritization is triggered while a request is outstanding."""

    pass


def get_store(config: Config) -> JsonWorkspaceStore:
    """Resolve the workspace file from config."""
    return JsonWorkspaceStore(config.data_path)


def get_llm(config: Config) -> LLMService:
    """Build the configured LLM backend."""
    if config.llm_backend == "http":
        return HTTPLLMService(
            api_url=config.llm_api_url,
            api_key=config.llm_api_key,
            model=config.llm_model,
            timeout=config.llm_timeout,
        )
    return ClaudeCLIService(cwd=PROHUB_HOME if PROHUB_HOME.exists() else None, timeout=config.llm_timeout)


def get_oracle(config: Config) -> LLMPrioritizationOracle:
    return LLMPrioritizationOracle(get_llm(config))


def resolve_id(items: Iterable[T], prefix: str) -> str:
    """Expand a unique id prefix (as shown in listings) to the full id."""
    ids = [item.id for item in items]
    if prefix in ids:
        return prefix
    matches = [i for i in ids if i.startswith(prefix)]
    if not matches:
        raise KeyError(f"No item with id {prefix!r}")
    if len(matches) > 1:
        raise KeyError(f"Id prefix {prefix!r} is ambiguous")
    return matches[0]


# ============== Prioritization ==============


class Prioritizer:
    """
    Single-flight prioritization runner.

    At most one oracle request is outstanding per runner. A failed request
    raises OracleRequestFailed and leaves the caller's tasks untouched.
    """

    def __init__(self, oracle: PrioritizationOracle, default_deadline_days: int = DEFAULT_DEADLINE_DAYS):
        self.oracle = oracle
        self.default_deadline_days = default_deadline_days
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    def run(self, tasks: list[Task], today: date | None = None) -> list[Task]:
        """Ask the oracle to rank the pending tasks and merge the answer."""
        if self._in_flight:
            raise PrioritizationInProgress("A prioritization request is already running")

        request = build_oracle_request(tasks, today, self.default_deadline_days)
        if not request:
            logger.info("No pending tasks to prioritize")
            return list(tasks)

        self._in_flight = True
        try:
            result = self.oracle.prioritize(request)
        finally:
            self._in_flight = False

        logger.info(f"Oracle ranked {len(result)} of {len(request)} pending tasks")
        return tasks_core.merge_ai_result(tasks, result)


def prioritize_tasks(
    config: Config,
    store: WorkspaceStore | None = None,
    oracle: PrioritizationOracle | None = None,
    today: date | None = None,
) -> list[Task]:
    """Prioritize stored tasks and save them. Nothing is saved on failure."""
    store = store or get_store(config)
    runner = Prioritizer(oracle or get_oracle(config), config.default_deadline_days)
    tasks = store.load_tasks()
    ranked = runner.run(tasks, today)
    store.save_tasks(ranked)
    return ranked


# ============== Tasks ==============


def add_task(
    store: WorkspaceStore,
    title: str,
    description: str = "",
    due_date: datetime | None = None,
    priority: Priority | None = None,
    tags: Iterable[str] | None = None,
) -> Task:
    """Create, validate and save a new task."""
    task_id = tasks_core.new_task_id()
    tasks = tasks_core.create_task(
        store.load_tasks(), title, description, due_date, priority, tags, task_id=task_id
    )
    task = next(t for t in tasks if t.id == task_id)
    validate_task(task)
    store.save_tasks(tasks)
    return task


def update_task(store: WorkspaceStore, task_id: str, **changes) -> Task:
    tasks = store.load_tasks()
    task_id = resolve_id(tasks, task_id)
    tasks = tasks_core.edit_task(tasks, task_id, **changes)
    task = next(t for t in tasks if t.id == task_id)
    validate_task(task)
    store.save_tasks(tasks)
    return task


def complete_task(store: WorkspaceStore, task_id: str, now: datetime | None = None) -> Task:
    """Toggle a task between pending and completed."""
    tasks = store.load_tasks()
    task_id = resolve_id(tasks, task_id)
    tasks = tasks_core.toggle_complete(tasks, task_id, now)
    store.save_tasks(tasks)
    return next(t for t in tasks if t.id == task_id)


def remove_task(store: WorkspaceStore, task_id: str) -> Task:
    tasks = store.load_tasks()
    task_id = resolve_id(tasks, task_id)
    removed = next(t for t in tasks if t.id == task_id)
    store.save_tasks(tasks_core.delete_task(tasks, task_id))
    return removed


# ============== Trades ==============


def add_trade(
    store: WorkspaceStore,
    asset: str,
    position: Position,
    entry_price: float,
    quantity: float,
    entry_timestamp: datetime | None = None,
    exit_price: float | None = None,
    exit_timestamp: datetime | None = None,
    strategy: str | None = None,
    reflection: str | None = None,
    risk_percentage: float | None = None,
) -> Trade:
    """Log a trade. It is closed when both exit fields are given."""
    closed = exit_price is not None and exit_timestamp is not None
    trade = validate_trade(
        Trade(
            id=uuid.uuid4().hex,
            asset=asset.strip().upper(),
            position=position,
            entry_timestamp=entry_timestamp or datetime.now(),
            entry_price=entry_price,
            quantity=quantity,
            exit_timestamp=exit_timestamp,
            exit_price=exit_price,
            strategy=strategy or None,
            reflection=reflection or None,
            risk_percentage=risk_percentage,
            status=TradeStatus.CLOSED if closed else TradeStatus.OPEN,
        )
    )
    store.save_trades([trade, *store.load_trades()])
    return trade


def exit_trade(
    store: WorkspaceStore,
    trade_id: str,
    exit_price: float,
    exit_timestamp: datetime | None = None,
) -> Trade:
    """Close an open trade."""
    trades = store.load_trades()
    trade_id = resolve_id(trades, trade_id)
    result = []
    closed = None
    for trade in trades:
        if trade.id == trade_id:
            trade = closed = validate_trade(close_trade(trade, exit_price, exit_timestamp or datetime.now()))
        result.append(trade)
    store.save_trades(result)
    return closed


def update_trade(store: WorkspaceStore, trade_id: str, **changes) -> Trade:
    """Edit a trade. Status and P&L follow the edited exit fields."""
    trades = store.load_trades()
    trade_id = resolve_id(trades, trade_id)
    result = []
    edited = None
    for trade in trades:
        if trade.id == trade_id:
            trade = edited = validate_trade(edit_trade(trade, **changes))
        result.append(trade)
    store.save_trades(result)
    return edited


def remove_trade(store: WorkspaceStore, trade_id: str) -> Trade:
    trades = store.load_trades()
    trade_id = resolve_id(trades, trade_id)
    removed = next(t for t in trades if t.id == trade_id)
    store.save_trades([t for t in trades if t.id != trade_id])
    return removed


# ============== Notes ==============


def add_note(
    store: WorkspaceStore,
    title: str,
    content: str = "",
    tags: Iterable[str] | None = None,
    starred: bool = False,
    now: datetime | None = None,
) -> Note:
    now = now or datetime.now()
    note = validate_note(
        Note(
            id=uuid.uuid4().hex,
            title=title.strip(),
            content=content,
            created_at=now,
            updated_at=now,
            tags=frozenset(t.strip().lower() for t in tags or [] if t.strip()),
            state=notes_core.Active(starred=starred),
        )
    )
    store.save_notes([note, *store.load_notes()])
    return note


def transition_note(
    store: WorkspaceStore,
    note_id: str,
    transition: Callable[..., Note | None],
    *args,
    **kwargs,
) -> Note | None:
    """
    Apply a note transition and save. Returns the updated note, or None when
    the transition deleted it.
    """
    notes = store.load_notes()
    note_id = resolve_id(notes, note_id)
    notes = notes_core.apply(notes, note_id, transition, *args, **kwargs)
    updated = next((n for n in notes if n.id == note_id), None)
    if updated is not None:
        validate_note(updated)
    store.save_notes(notes)
    return updated
