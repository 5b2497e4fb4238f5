"""Pomodoro timer state machine - pure, clock-free."""

from dataclasses import dataclass, replace
from enum import Enum

LONG_BREAK_EVERY = 4


class TimerMode(Enum):
    """Session kinds with their length in seconds."""

    POMODORO = "pomodoro"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def duration(self) -> int:
        return DURATIONS[self]

    @property
    def label(self) -> str:
        return LABELS[self]


DURATIONS = {
    TimerMode.POMODORO: 25 * 60,
    TimerMode.SHORT_BREAK: 5 * 60,
    TimerMode.LONG_BREAK: 15 * 60,
}

LABELS = {
    TimerMode.POMODORO: "Focus Session",
    TimerMode.SHORT_BREAK: "Short Break",
    TimerMode.LONG_BREAK: "Long Break",
}


@dataclass(frozen=True)
class TimerState:
    mode: TimerMode = TimerMode.POMODORO
    remaining: int = DURATIONS[TimerMode.POMODORO]
    running: bool = False
    completed_pomodoros: int = 0

    @property
    def progress(self) -> float:
        """Elapsed fraction of the current session, 0..1."""
        total = self.mode.duration
        return (total - self.remaining) / total

    def format_remaining(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"


def start(state: TimerState) -> TimerState:
    return replace(state, running=True)


def pause(state: TimerState) -> TimerState:
    return replace(state, running=False)


def reset(state: TimerState) -> TimerState:
    """Stop and rewind the current session."""
    return replace(state, running=False, remaining=state.mode.duration)


def select_mode(state: TimerState, mode: TimerMode) -> TimerState:
    """Switch to another session kind, stopped and full length."""
    return replace(state, mode=mode, remaining=mode.duration, running=False)


def finish_session(state: TimerState) -> TimerState:
    """
    End the current session and queue the next one, stopped.

    Every fourth completed pomodoro earns a long break; any break leads back
    to a pomodoro.
    """
    if state.mode is TimerMode.POMODORO:
        completed = state.completed_pomodoros + 1
        next_mode = TimerMode.LONG_BREAK if completed % LONG_BREAK_EVERY == 0 else TimerMode.SHORT_BREAK
    else:
        completed = state.completed_pomodoros
        next_mode = TimerMode.POMODORO
    return TimerState(
        mode=next_mode,
        remaining=next_mode.duration,
        running=False,
        completed_pomodoros=completed,
    )


def tick(state: TimerState, seconds: int = 1) -> TimerState:
    """Advance a running timer. Reaching zero finishes the session."""
    if not state.running:
        return state
    remaining = state.remaining - seconds
    if remaining <= 0:
        return finish_session(state)
    return replace(state, remaining=remaining)
