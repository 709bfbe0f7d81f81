"""Flat-file implementation of the daily log repository."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from diet_assistant.adapters.files import StorageError, read_lines, write_lines
from diet_assistant.adapters.text_codec import (
    RecordParseError,
    format_log_line,
    parse_log_line,
)
from diet_assistant.domain.logs import LogEntry
from diet_assistant.services.daily_log import (
    DailyLogRepository,
    InvalidDateError,
    validate_date,
)

LOG_SUFFIX = ".log"

_logger = logging.getLogger(__name__)


@dataclass
class TextDailyLogRepository(DailyLogRepository):
    """Stores one ``<date>.log`` file per date under a per-user directory."""

    directory: Path
    skipped: list[RecordParseError] = field(default_factory=list)

    @classmethod
    def for_user(cls, logs_root: Path, username: str) -> "TextDailyLogRepository":
        """Create a repository rooted at the user's log directory."""
        if username in {".", ".."} or Path(username).name != username:
            raise ValueError(f"Invalid username for log directory: {username!r}")
        return cls(directory=logs_root / username if username else logs_root)

    def read_entries(self, date: str) -> list[LogEntry] | None:
        path = self._path(date)
        lines = read_lines(path)
        if lines is None:
            return None
        entries = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = parse_log_line(line, str(path), line_number)
            except RecordParseError as exc:
                _logger.warning("Skipping malformed log record: %s", exc)
                self.skipped.append(exc)
                continue
            entries.append(
                LogEntry(
                    food_id=record.food_id,
                    servings=record.servings,
                    timestamp=record.timestamp,
                )
            )
        return entries

    def write_entries(self, date: str, entries: list[LogEntry]) -> None:
        write_lines(
            self._path(date),
            [
                format_log_line(entry.food_id, entry.servings, entry.timestamp)
                for entry in entries
            ],
        )

    def list_dates(self) -> list[str]:
        """Return dates of all well-named log files, sorted."""
        try:
            paths = list(self.directory.glob(f"*{LOG_SUFFIX}"))
        except OSError as exc:
            raise StorageError(f"Failed to list {self.directory}: {exc}") from exc
        dates = []
        for path in paths:
            try:
                dates.append(validate_date(path.stem))
            except InvalidDateError:
                _logger.warning("Ignoring unexpected log file %s", path)
        return sorted(dates)

    def _path(self, date: str) -> Path:
        return self.directory / f"{validate_date(date)}{LOG_SUFFIX}"
