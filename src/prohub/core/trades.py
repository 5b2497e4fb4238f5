"""Pure trade journal logic - P&L and performance aggregation."""

from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable

from .timestamps import parse_timestamp

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
NOT_AVAILABLE = "N/A"


class Position(Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"


def compute_pnl(position: Position, entry_price: float, exit_price: float, quantity: float) -> float:
    """Profit or loss of a round trip."""
    if position is Position.LONG:
        return (exit_price - entry_price) * quantity
    return (entry_price - exit_price) * quantity


@dataclass(frozen=True)
class Trade:
    """A journaled trade. P&L is derived, never stored."""

    id: str
    asset: str
    position: Position
    entry_timestamp: datetime
    entry_price: float
    quantity: float
    exit_timestamp: datetime | None = None
    exit_price: float | None = None
    strategy: str | None = None
    reflection: str | None = None
    risk_percentage: float | None = None
    status: TradeStatus = TradeStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status is TradeStatus.CLOSED

    @property
    def pnl(self) -> float | None:
        """P&L for a closed trade with both exit fields, otherwise None."""
        if not self.is_closed or self.exit_price is None or self.exit_timestamp is None:
            return None
        return compute_pnl(self.position, self.entry_price, self.exit_price, self.quantity)

    @property
    def outcome(self) -> str:
        """Card label: OPEN, PROFIT, LOSS or BREAKEVEN."""
        pnl = self.pnl
        if pnl is None:
            return "OPEN"
        if pnl > 0:
            return "PROFIT"
        if pnl < 0:
            return "LOSS"
        return "BREAKEVEN"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "asset": self.asset,
            "position": self.position.value,
            "entryTimestamp": self.entry_timestamp.isoformat(),
            "exitTimestamp": self.exit_timestamp.isoformat() if self.exit_timestamp else None,
            "entryPrice": self.entry_price,
            "exitPrice": self.exit_price,
            "quantity": self.quantity,
            "strategy": self.strategy,
            "reflection": self.reflection,
            "riskPercentage": self.risk_percentage,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Trade":
        """Create Trade from a stored record."""
        return cls(
            id=data["id"],
            asset=data["asset"],
            position=Position(data["position"]),
            entry_timestamp=parse_timestamp(data["entryTimestamp"]),
            entry_price=data["entryPrice"],
            quantity=data["quantity"],
            exit_timestamp=parse_timestamp(data.get("exitTimestamp")),
            exit_price=data.get("exitPrice"),
            strategy=data.get("strategy"),
            reflection=data.get("reflection"),
            risk_percentage=data.get("riskPercentage"),
            status=TradeStatus(data.get("status", "open")),
        )


def close_trade(trade: Trade, exit_price: float, exit_timestamp: datetime) -> Trade:
    """Record the exit of a trade."""
    return replace(
        trade,
        exit_price=exit_price,
        exit_timestamp=exit_timestamp,
        status=TradeStatus.CLOSED,
    )


EDITABLE_TRADE_FIELDS = frozenset(
    {
        "asset",
        "position",
        "entry_timestamp",
        "entry_price",
        "quantity",
        "exit_timestamp",
        "exit_price",
        "strategy",
        "reflection",
        "risk_percentage",
    }
)


def edit_trade(trade: Trade, **changes) -> Trade:
    """
    Replace fields of a trade and re-derive its status.

    The trade is closed when both exit fields are set after the edit and
    open otherwise, so P&L always follows the edited values.
    """
    unknown = set(changes) - EDITABLE_TRADE_FIELDS
    if unknown:
        raise TypeError(f"Cannot edit trade fields: {', '.join(sorted(unknown))}")
    if "asset" in changes:
        changes["asset"] = changes["asset"].strip().upper()
    edited = replace(trade, **changes)
    closed = edited.exit_price is not None and edited.exit_timestamp is not None
    return replace(edited, status=TradeStatus.CLOSED if closed else TradeStatus.OPEN)


@dataclass
class SummaryStats:
    """Aggregate performance over closed trades."""

    total_pnl: float = 0.0
    win_rate: float = 0.0  # fraction 0..1
    average_win: float = 0.0
    average_loss: float = 0.0  # zero or negative
    closed_count: int = 0
    winning_count: int = 0
    losing_count: int = 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # zero or negative
    profit_factor: float | None = None  # None without losses


@dataclass
class WeeklyInsights:
    """Performance for one Monday-to-Sunday week."""

    week_start: date
    week_end: date
    total_pnl: float = 0.0
    win_rate: float = 0.0
    winning_count: int = 0
    losing_count: int = 0
    best_asset: str = NOT_AVAILABLE
    most_used_strategy: str = NOT_AVAILABLE
    closed_count: int = 0
    pnl_by_day: list[float] = field(default_factory=lambda: [0.0] * 7)


def _closed(trades: Iterable[Trade]) -> list[Trade]:
    return [t for t in trades if t.is_closed]


def summarize(trades: Iterable[Trade]) -> SummaryStats:
    """
    Summary statistics over closed trades.

    Closed trades without a computable P&L count as zero. Empty input gives
    all zeros.

    Pure function - no I/O.
    """
    pnls = [t.pnl or 0.0 for t in _closed(trades)]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    stats = SummaryStats(
        total_pnl=sum(pnls),
        closed_count=len(pnls),
        winning_count=len(wins),
        losing_count=len(losses),
        gross_profit=sum(wins),
        gross_loss=sum(losses),
    )
    if pnls:
        stats.win_rate = len(wins) / len(pnls)
    if wins:
        stats.average_win = stats.gross_profit / len(wins)
    if losses:
        stats.average_loss = stats.gross_loss / len(losses)
        stats.profit_factor = stats.gross_profit / abs(stats.gross_loss)
    return stats


def week_bounds(reference: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing `reference`."""
    if isinstance(reference, datetime):
        reference = reference.date()
    monday = reference - timedelta(days=reference.weekday())
    return monday, monday + timedelta(days=6)


def weekly_insights(trades: Iterable[Trade], reference: date | None = None) -> WeeklyInsights:
    """
    Insights for closed trades that exited during the week of `reference`.

    Pure function - no I/O.
    """
    monday, sunday = week_bounds(reference or date.today())
    insights = WeeklyInsights(week_start=monday, week_end=sunday)

    in_week = [
        t
        for t in _closed(trades)
        if t.exit_timestamp is not None and monday <= t.exit_timestamp.date() <= sunday
    ]
    if not in_week:
        return insights

    by_asset: dict[str, float] = defaultdict(float)
    strategies: Counter[str] = Counter()
    for trade in in_week:
        pnl = trade.pnl or 0.0
        insights.total_pnl += pnl
        if pnl > 0:
            insights.winning_count += 1
        elif pnl < 0:
            insights.losing_count += 1
        by_asset[trade.asset] += pnl
        if trade.strategy:
            strategies[trade.strategy] += 1
        insights.pnl_by_day[trade.exit_timestamp.weekday()] += pnl

    insights.closed_count = len(in_week)
    insights.win_rate = insights.winning_count / len(in_week)

    # First asset wins ties
    best, best_pnl = None, None
    for asset, total in by_asset.items():
        if best_pnl is None or total > best_pnl:
            best, best_pnl = asset, total
    insights.best_asset = best

    if strategies:
        # most_common keeps first-seen order among equal counts
        insights.most_used_strategy = strategies.most_common(1)[0][0]
    return insights
