"""ProHub CLI - tasks, notes, trade journal and focus timer."""

import json
import logging
import sys
import time
from datetime import date, datetime

import click

from .config import load_config
from .core import notes as notes_core
from .core import timer as timer_core
from .core.dashboard import assemble_dashboard
from .core.notes import filter_counts, filter_notes, list_tags, parse_tags
from .core.prioritization import OracleRequestFailed
from .core.tasks import Priority, Task, ViewFilter, rank
from .core.trades import WEEKDAYS, Position, Trade, summarize, weekly_insights
from .core.validation import ValidationError
from .workflows import (
    PrioritizationInProgress,
    add_note,
    add_task,
    add_trade,
    complete_task,
    exit_trade,
    get_store,
    prioritize_tasks,
    remove_task,
    remove_trade,
    transition_note,
    update_task,
    update_trade,
)

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]
PRIORITY_MARKERS = {Priority.HIGH: "!!!", Priority.MEDIUM: "!!", Priority.LOW: "!", None: ""}


def _store():
    return get_store(load_config())


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _short(item_id: str) -> str:
    return item_id[:8]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option()
def main(debug: bool):
    """ProHub - Productivity Hub CLI."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


# ============== Tasks ==============


def _task_json(task: Task) -> dict:
    data = task.to_dict()
    data["shortId"] = _short(task.id)
    return data


def _show_tasks(tasks: list[Task], as_json: bool, empty_msg: str = "No tasks in this category.") -> None:
    if as_json:
        click.echo(json.dumps([_task_json(t) for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for task in tasks:
        check = "x" if task.is_completed else " "
        marker = PRIORITY_MARKERS[task.priority]
        due = f" (due {task.due_date.date()})" if task.due_date else ""
        ai = f" [AI #{task.ai_priority}]" if task.ai_priority is not None else ""
        click.echo(f"{_short(task.id)} [{check}] [{marker:3}] {task.title}{due}{ai}")
        if task.ai_reason:
            click.echo(f"{'':14}→ {task.ai_reason}")


@main.group(invoke_without_command=True)
@click.pass_context
def tasks(ctx):
    """Manage tasks."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(tasks_list)


@tasks.command("list")
@click.option(
    "--view",
    type=click.Choice([v.value for v in ViewFilter]),
    default=ViewFilter.ALL.value,
    help="Which tab to show",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_list(view: str = ViewFilter.ALL.value, as_json: bool = False):
    """List tasks in display order."""
    _show_tasks(rank(_store().load_tasks(), ViewFilter(view)), as_json)


@tasks.command("add")
@click.argument("title")
@click.option("-d", "--description", default="", help="Details")
@click.option("--due", type=click.DateTime(DATE_FORMATS), help="Due date")
@click.option("-p", "--priority", type=click.Choice([p.value for p in Priority]), help="Priority")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
def tasks_add(title: str, description: str, due: datetime | None, priority: str | None, tags: tuple[str, ...]):
    """Add a task."""
    try:
        task = add_task(_store(), title, description, due, Priority.parse(priority), tags)
    except ValidationError as e:
        _fail(str(e))
    click.echo(f'Task added: "{task.title}" ({_short(task.id)})')


@tasks.command("edit")
@click.argument("task_id")
@click.option("--title", help="New title")
@click.option("-d", "--description", help="New details")
@click.option("--due", type=click.DateTime(DATE_FORMATS), help="New due date")
@click.option("-p", "--priority", type=click.Choice([p.value for p in Priority]), help="New priority")
@click.option("-t", "--tag", "tags", multiple=True, help="Replace tags (repeatable)")
def tasks_edit(task_id, title, description, due, priority, tags):
    """Edit a task."""
    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if due is not None:
        changes["due_date"] = due
    if priority is not None:
        changes["priority"] = Priority.parse(priority)
    if tags:
        changes["tags"] = tags
    if not changes:
        _fail("Nothing to change.")
    try:
        task = update_task(_store(), task_id, **changes)
    except KeyError as e:
        _fail(e.args[0])
    except ValidationError as e:
        _fail(str(e))
    click.echo(f'Task updated: "{task.title}"')


@tasks.command("done")
@click.argument("task_id")
def tasks_done(task_id: str):
    """Toggle a task between pending and completed."""
    try:
        task = complete_task(_store(), task_id)
    except KeyError as e:
        _fail(e.args[0])
    state = "completed" if task.is_completed else "reopened"
    click.echo(f'Task {state}: "{task.title}"')


@tasks.command("rm")
@click.argument("task_id")
def tasks_rm(task_id: str):
    """Delete a task."""
    try:
        task = remove_task(_store(), task_id)
    except KeyError as e:
        _fail(e.args[0])
    click.echo(f'Task deleted: "{task.title}"')


@tasks.command("prioritize")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks_prioritize(as_json: bool):
    """Reorder pending tasks with AI suggestions."""
    config = load_config()
    if not as_json:
        click.echo("Prioritizing...")
    try:
        ranked = prioritize_tasks(config, store=get_store(config))
    except (OracleRequestFailed, PrioritizationInProgress) as e:
        _fail(f"Could not prioritize tasks: {e}")
    _show_tasks([t for t in ranked if t.is_pending], as_json, "No pending tasks to prioritize.")


# ============== Trades ==============


def _show_trades(trades: list[Trade], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([{**t.to_dict(), "pnl": t.pnl} for t in trades], indent=2))
        return

    if not trades:
        click.echo("No trades logged yet.")
        return

    for trade in trades:
        pnl = f"{trade.pnl:+,.2f}" if trade.pnl is not None else "N/A"
        entered = trade.entry_timestamp.strftime("%b %d, %H:%M")
        strategy = f" [{trade.strategy}]" if trade.strategy else ""
        click.echo(
            f"{_short(trade.id)} {trade.outcome:9} {trade.asset:8} {trade.position.value:5} "
            f"{trade.quantity:g} @ {trade.entry_price:g}  {entered}  P&L {pnl}{strategy}"
        )


@main.group(invoke_without_command=True)
@click.pass_context
def trades(ctx):
    """Trade journal."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(trades_list)


@trades.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def trades_list(as_json: bool = False):
    """List logged trades."""
    _show_trades(_store().load_trades(), as_json)


@trades.command("add")
@click.argument("asset")
@click.argument("position", type=click.Choice([p.value for p in Position]))
@click.option("--entry", "entry_price", type=float, required=True, help="Entry price")
@click.option("--qty", "quantity", type=float, required=True, help="Quantity")
@click.option("--entered", type=click.DateTime(DATE_FORMATS), help="Entry time (default now)")
@click.option("--exit", "exit_price", type=float, help="Exit price")
@click.option("--exited", type=click.DateTime(DATE_FORMATS), help="Exit time")
@click.option("-s", "--strategy", help="Strategy name")
@click.option("-r", "--reflection", help="Reflection")
@click.option("--risk", type=float, help="Risk percentage")
def trades_add(asset, position, entry_price, quantity, entered, exit_price, exited, strategy, reflection, risk):
    """Log a trade."""
    try:
        trade = add_trade(
            _store(),
            asset,
            Position(position),
            entry_price,
            quantity,
            entry_timestamp=entered,
            exit_price=exit_price,
            exit_timestamp=exited,
            strategy=strategy,
            reflection=reflection,
            risk_percentage=risk,
        )
    except ValidationError as e:
        _fail(str(e))
    click.echo(f"Trade logged: {trade.asset} {trade.position.value} ({_short(trade.id)})")


@trades.command("close")
@click.argument("trade_id")
@click.option("--exit", "exit_price", type=float, required=True, help="Exit price")
@click.option("--exited", type=click.DateTime(DATE_FORMATS), help="Exit time (default now)")
def trades_close(trade_id: str, exit_price: float, exited: datetime | None):
    """Close an open trade."""
    try:
        trade = exit_trade(_store(), trade_id, exit_price, exited)
    except KeyError as e:
        _fail(e.args[0])
    except ValidationError as e:
        _fail(str(e))
    click.echo(f"Trade closed: {trade.asset} P&L {trade.pnl:+,.2f}")


@trades.command("edit")
@click.argument("trade_id")
@click.option("--asset", help="New asset symbol")
@click.option("--position", type=click.Choice([p.value for p in Position]), help="New direction")
@click.option("--entry", "entry_price", type=float, help="New entry price")
@click.option("--qty", "quantity", type=float, help="New quantity")
@click.option("--entered", type=click.DateTime(DATE_FORMATS), help="New entry time")
@click.option("--exit", "exit_price", type=float, help="New exit price")
@click.option("--exited", type=click.DateTime(DATE_FORMATS), help="New exit time")
@click.option("--reopen", is_flag=True, help="Clear the exit, making the trade open again")
@click.option("-s", "--strategy", help="New strategy name")
@click.option("-r", "--reflection", help="New reflection")
@click.option("--risk", type=float, help="New risk percentage")
def trades_edit(
    trade_id, asset, position, entry_price, quantity, entered, exit_price, exited, reopen, strategy, reflection, risk
):
    """Edit a trade. It is closed when it has both an exit price and time."""
    changes = {
        "asset": asset,
        "position": Position(position) if position else None,
        "entry_price": entry_price,
        "quantity": quantity,
        "entry_timestamp": entered,
        "exit_price": exit_price,
        "exit_timestamp": exited,
        "strategy": strategy,
        "reflection": reflection,
        "risk_percentage": risk,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if reopen:
        if exit_price is not None or exited is not None:
            _fail("--reopen cannot be combined with --exit or --exited.")
        changes.update(exit_price=None, exit_timestamp=None)
    if not changes:
        _fail("Nothing to change.")
    try:
        trade = update_trade(_store(), trade_id, **changes)
    except KeyError as e:
        _fail(e.args[0])
    except ValidationError as e:
        _fail(str(e))
    pnl = f"{trade.pnl:+,.2f}" if trade.pnl is not None else "N/A"
    click.echo(f"Trade updated: {trade.asset} {trade.status.value} P&L {pnl}")


@trades.command("rm")
@click.argument("trade_id")
def trades_rm(trade_id: str):
    """Delete a trade."""
    try:
        trade = remove_trade(_store(), trade_id)
    except KeyError as e:
        _fail(e.args[0])
    click.echo(f"Trade deleted: {trade.asset}")


@trades.command("summary")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def trades_summary(as_json: bool):
    """Overall P&L and win rate."""
    stats = summarize(_store().load_trades())
    if as_json:
        click.echo(json.dumps(vars(stats), indent=2))
        return
    click.echo(f"Total P&L:    {stats.total_pnl:+,.2f}")
    click.echo(f"Win rate:     {stats.win_rate * 100:.1f}% ({stats.closed_count} closed)")
    click.echo(f"Average win:  {stats.average_win:,.2f}")
    click.echo(f"Average loss: {abs(stats.average_loss):,.2f}")
    profit_factor = f"{stats.profit_factor:.2f}" if stats.profit_factor is not None else "N/A"
    click.echo(f"Profit factor: {profit_factor}")


@trades.command("week")
@click.option("--date", "ref", type=click.DateTime(["%Y-%m-%d"]), help="Any day in the week (default today)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def trades_week(ref: datetime | None, as_json: bool):
    """Weekly insights, Monday to Sunday."""
    insights = weekly_insights(_store().load_trades(), ref.date() if ref else date.today())
    if as_json:
        data = vars(insights).copy()
        data["week_start"] = insights.week_start.isoformat()
        data["week_end"] = insights.week_end.isoformat()
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(f"### Week of {insights.week_start.strftime('%B %d')}")
    click.echo(f"P&L: {insights.total_pnl:+,.2f}  Win rate: {insights.win_rate * 100:.0f}%")
    click.echo(f"Wins: {insights.winning_count}  Losses: {insights.losing_count}")
    click.echo(f"Best asset: {insights.best_asset}  Top strategy: {insights.most_used_strategy}")
    for day, pnl in zip(WEEKDAYS, insights.pnl_by_day):
        click.echo(f"  {day} {pnl:+,.2f}")


# ============== Notes ==============


def _show_notes(notes: list, as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(json.dumps([{**n.to_dict(), "shortId": _short(n.id)} for n in notes], indent=2))
        return

    if not notes:
        click.echo(empty_msg)
        return

    for note in notes:
        pin = "*" if note.is_starred else " "
        tags = f" #{' #'.join(sorted(note.tags))}" if note.tags else ""
        updated = note.updated_at.strftime("%b %d, %Y")
        click.echo(f"{_short(note.id)} {pin} {note.title}  ({updated}){tags}")


@main.group(invoke_without_command=True)
@click.pass_context
def notes(ctx):
    """Manage notes."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(notes_list)


@notes.command("list")
@click.option("-f", "--filter", "active_filter", default="all", help="all, starred, archived, trash or a tag")
@click.option("-s", "--search", default="", help="Search title, content and tags")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def notes_list(active_filter: str = "all", search: str = "", as_json: bool = False):
    """List notes, most recently updated first."""
    found = filter_notes(_store().load_notes(), active_filter.lower(), search)
    if search:
        empty = "No notes match your search."
    elif active_filter == "trash":
        empty = "Trash is empty."
    else:
        empty = "No notes here."
    _show_notes(found, as_json, empty)


@notes.command("add")
@click.argument("title")
@click.option("-c", "--content", default="", help="Markdown content")
@click.option("-t", "--tags", default="", help="Comma-separated tags")
@click.option("--star", is_flag=True, help="Star the note")
def notes_add(title: str, content: str, tags: str, star: bool):
    """Add a note."""
    try:
        note = add_note(_store(), title, content, parse_tags(tags), starred=star)
    except ValidationError as e:
        _fail(str(e))
    click.echo(f'Note added: "{note.title}" ({_short(note.id)})')


@notes.command("edit")
@click.argument("note_id")
@click.option("--title", help="New title")
@click.option("-c", "--content", help="New content")
@click.option("-t", "--tags", help="Comma-separated tags")
def notes_edit(note_id: str, title: str | None, content: str | None, tags: str | None):
    """Edit a note."""
    tag_set = parse_tags(tags) if tags is not None else None
    try:
        note = transition_note(_store(), note_id, notes_core.edit_note, title, content, tag_set)
    except KeyError as e:
        _fail(e.args[0])
    except ValidationError as e:
        _fail(str(e))
    click.echo(f'Note updated: "{note.title}"')


def _note_toggle(note_id: str, transition, done_msg: str) -> None:
    try:
        note = transition_note(_store(), note_id, transition)
    except KeyError as e:
        _fail(e.args[0])
    if note is None:
        click.echo("Note permanently deleted.")
    else:
        click.echo(done_msg.format(title=note.title, note=note))


@notes.command("star")
@click.argument("note_id")
def notes_star(note_id: str):
    """Star or unstar a note."""
    _note_toggle(note_id, notes_core.toggle_star, 'Note "{title}" starred: {note.is_starred}')


@notes.command("archive")
@click.argument("note_id")
def notes_archive(note_id: str):
    """Archive or unarchive a note."""
    _note_toggle(note_id, notes_core.toggle_archive, 'Note "{title}" archived: {note.is_archived}')


@notes.command("trash")
@click.argument("note_id")
def notes_trash(note_id: str):
    """Move a note to the trash; trashing again deletes it."""
    _note_toggle(note_id, notes_core.toggle_trash, 'Note "{title}" moved to trash.')


@notes.command("restore")
@click.argument("note_id")
def notes_restore(note_id: str):
    """Restore a note from the trash."""
    _note_toggle(note_id, notes_core.restore, 'Note "{title}" restored.')


@notes.command("tags")
def notes_tags():
    """List tags with filter counts."""
    all_notes = _store().load_notes()
    for name, count in filter_counts(all_notes).items():
        click.echo(f"{name:10} {count}")
    tags = list_tags(all_notes)
    if tags:
        click.echo()
        for tag in tags:
            click.echo(f"#{tag}")


# ============== Timer ==============


@main.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in timer_core.TimerMode]),
    default=timer_core.TimerMode.POMODORO.value,
    help="Session to start with",
)
@click.option("--sessions", default=1, show_default=True, help="Sessions to run back to back")
def timer(mode: str, sessions: int):
    """Run a pomodoro focus timer."""
    state = timer_core.select_mode(timer_core.TimerState(), timer_core.TimerMode(mode))
    try:
        for _ in range(sessions):
            click.echo(f"{state.mode.label} ({state.format_remaining()})")
            state = timer_core.start(state)
            current = state.mode
            with click.progressbar(length=state.remaining, show_eta=False) as bar:
                while state.running and state.mode is current:
                    time.sleep(1)
                    state = timer_core.tick(state)
                    bar.update(1)
            if current is timer_core.TimerMode.POMODORO:
                click.echo(f"Work session complete! Time for a {state.mode.label.lower()}.")
            else:
                click.echo("Break over. Time to get back to work!")
    except KeyboardInterrupt:
        click.echo("\nTimer stopped.")
    click.echo(f"Pomodoros completed: {state.completed_pomodoros}")


# ============== Dashboard ==============


@main.command()
def dashboard():
    """Overview of tasks, trades and notes."""
    store = _store()
    data = assemble_dashboard(store.load_tasks(), store.load_trades(), store.load_notes())

    click.echo(f"### {data.date.strftime('%A, %B %d')}")
    click.echo(
        f"Tasks: {data.pending_count} pending, {data.due_today_count} due today, "
        f"{data.completed_count} completed"
    )
    for task in data.top_tasks:
        click.echo(f"  • {task.title}")
    stats = data.trade_stats
    click.echo(f"Trading: P&L {stats.total_pnl:+,.2f}, win rate {stats.win_rate * 100:.0f}%")
    click.echo(f"This week: {data.week.total_pnl:+,.2f} (best {data.week.best_asset})")
    if data.starred_notes:
        click.echo("Starred notes:")
        for note in data.starred_notes:
            click.echo(f"  * {note.title}")


if __name__ == "__main__":
    main()
