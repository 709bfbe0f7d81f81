"""Daily consumption log with write-through persistence and undo."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from diet_assistant.domain.foods import FoodLookup
from diet_assistant.domain.logs import DateState, LogEntry, UndoSnapshot

DATE_FORMAT = "%Y-%m-%d"

_logger = logging.getLogger(__name__)


class InvalidDateError(ValueError):
    """Raised when a log date is not in YYYY-MM-DD form."""


class DailyLogRepository(Protocol):
    """Persistence interface for per-date log entries."""

    def read_entries(self, date: str) -> list[LogEntry] | None:
        """Return the stored entries for a date, or None if none are stored."""

    def write_entries(self, date: str, entries: list[LogEntry]) -> None:
        """Replace the stored entries for a date."""

    def list_dates(self) -> list[str]:
        """Return every date with stored entries."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DailyLog:
    """Per-date entry sequences, loaded lazily and persisted on every change.

    Each mutation pushes a snapshot of the date's previous entry sequence
    once the new sequence is persisted; ``undo`` restores the most recent
    snapshot wholesale. A failed write leaves memory and history untouched.
    """

    repository: DailyLogRepository
    undo_limit: int | None = None
    clock: Callable[[], datetime] = _utc_now
    _entries: dict[str, list[LogEntry]] = field(
        default_factory=dict, init=False, repr=False
    )
    _states: dict[str, DateState] = field(default_factory=dict, init=False, repr=False)
    _undo_stack: list[UndoSnapshot] = field(
        default_factory=list, init=False, repr=False
    )

    def state(self, date: str) -> DateState:
        """Return whether a date's entries are cached in memory."""
        return self._states.get(date, DateState.UNLOADED)

    def add_entry(self, date: str, food_id: str, servings: int) -> LogEntry:
        """Append an entry stamped with the current time and persist the date."""
        entries = self._ensure_loaded(validate_date(date))
        entry = LogEntry(
            food_id=food_id,
            servings=servings,
            timestamp=int(self.clock().timestamp()),
        )
        self._commit(date, [*entries, entry])
        return entry

    def remove_entry(self, date: str, index: int) -> LogEntry | None:
        """Remove the entry at ``index`` and return it.

        Does nothing for a date that has not been loaded yet. For a loaded
        date the undo snapshot is pushed before the bounds check, so an
        out-of-range index still consumes an undo slot.
        """
        validate_date(date)
        if self.state(date) is DateState.UNLOADED:
            _logger.debug("Ignoring removal for unloaded date %s", date)
            return None
        entries = self._entries[date]
        if not 0 <= index < len(entries):
            self._push_snapshot(date)
            return None
        self._commit(date, [*entries[:index], *entries[index + 1 :]])
        return entries[index]

    def get_log(self, date: str) -> list[LogEntry]:
        """Return the entries for a date, loading them on first access."""
        return list(self._ensure_loaded(validate_date(date)))

    def calculate_total_calories(self, date: str, food_lookup: FoodLookup) -> float:
        """Sum calories for a date; entries whose food is gone count as zero."""
        total = 0.0
        for entry in self.get_log(date):
            food = food_lookup(entry.food_id)
            if food is None:
                continue
            total += food.calculate_calories(entry.servings)
        return total

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    def undo(self) -> str | None:
        """Restore the latest snapshot and return its date, if any."""
        if not self._undo_stack:
            return None
        snapshot = self._undo_stack[-1]
        entries = list(snapshot.entries)
        self.repository.write_entries(snapshot.date, entries)
        self._undo_stack.pop()
        self._entries[snapshot.date] = entries
        self._states[snapshot.date] = DateState.LOADED
        _logger.debug("Restored %s entries for %s", len(entries), snapshot.date)
        return snapshot.date

    def save(self) -> None:
        """Persist every loaded date."""
        for date, entries in self._entries.items():
            self.repository.write_entries(date, entries)

    def load(self) -> None:
        """Drop cached dates and undo history, then load every stored date."""
        self._entries.clear()
        self._states.clear()
        self._undo_stack.clear()
        for date in self.repository.list_dates():
            self._ensure_loaded(date)
        _logger.info("Loaded daily log for %s dates", len(self._entries))

    def _ensure_loaded(self, date: str) -> list[LogEntry]:
        if self.state(date) is DateState.LOADED:
            return self._entries[date]
        entries = list(self.repository.read_entries(date) or [])
        self._entries[date] = entries
        self._states[date] = DateState.LOADED
        return entries

    def _commit(self, date: str, entries: list[LogEntry]) -> None:
        # Memory and undo history change only once the write has succeeded.
        self.repository.write_entries(date, entries)
        self._push_snapshot(date)
        self._entries[date] = entries

    def _push_snapshot(self, date: str) -> None:
        self._undo_stack.append(UndoSnapshot(date, tuple(self._entries[date])))
        if self.undo_limit is not None and len(self._undo_stack) > self.undo_limit:
            del self._undo_stack[0]


def validate_date(date: str) -> str:
    """Return ``date`` if it is a calendar date in YYYY-MM-DD form."""
    try:
        parsed = datetime.strptime(date, DATE_FORMAT)  # noqa: DTZ007
    except (TypeError, ValueError) as exc:
        raise InvalidDateError(f"Invalid date: {date!r}") from exc
    if parsed.strftime(DATE_FORMAT) != date:
        raise InvalidDateError(f"Invalid date: {date!r}")
    return date
