"""Domain models for the daily consumption log."""

from dataclasses import dataclass
from enum import Enum


class DateState(Enum):
    """Load state of a single date in the daily log."""

    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass(frozen=True)
class LogEntry:
    """A single consumption record."""

    food_id: str
    servings: int
    timestamp: int


@dataclass(frozen=True)
class UndoSnapshot:
    """Full entry sequence of a date captured before a mutation."""

    date: str
    entries: tuple[LogEntry, ...]
