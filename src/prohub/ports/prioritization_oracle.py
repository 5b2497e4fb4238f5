"""Prioritization oracle interface."""

from typing import Protocol

from prohub.core.prioritization import OracleTask, PrioritizedTask


class PrioritizationOracle(Protocol):
    """Ranks tasks by urgency and importance. Priority 1 is the top."""

    def prioritize(self, tasks: list[OracleTask]) -> list[PrioritizedTask]:
        """Rank tasks. Raises OracleRequestFailed on any failure."""
        ...
