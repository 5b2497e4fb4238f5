"""ProHub - tasks, notes, trade journal and focus timer."""

__version__ = "0.1.0"
