"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from diet_assistant.adapters.files import StorageError
from diet_assistant.config import Settings
from diet_assistant.domain.logs import LogEntry
from diet_assistant.domain.records import BasicFoodRecord, CompositeFoodRecord
from diet_assistant.services.daily_log import DailyLog, DailyLogRepository
from diet_assistant.services.foods import FoodRepository, FoodStore


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    basic: list[BasicFoodRecord] = field(default_factory=list)
    composite: list[CompositeFoodRecord] = field(default_factory=list)
    saves: int = 0

    def load_basic_foods(self) -> list[BasicFoodRecord]:
        return list(self.basic)

    def load_composite_foods(self) -> list[CompositeFoodRecord]:
        return list(self.composite)

    def save_basic_foods(self, records: list[BasicFoodRecord]) -> None:
        self.basic = list(records)
        self.saves += 1

    def save_composite_foods(self, records: list[CompositeFoodRecord]) -> None:
        self.composite = list(records)


@dataclass
class InMemoryDailyLogRepository(DailyLogRepository):
    """In-memory daily log repository that records reads and writes."""

    files: dict[str, list[LogEntry]] = field(default_factory=dict)
    reads: list[str] = field(default_factory=list)
    writes: list[str] = field(default_factory=list)
    fail_writes: bool = False

    def read_entries(self, date: str) -> list[LogEntry] | None:
        self.reads.append(date)
        stored = self.files.get(date)
        return list(stored) if stored is not None else None

    def write_entries(self, date: str, entries: list[LogEntry]) -> None:
        if self.fail_writes:
            raise StorageError(f"Failed to write {date}")
        self.writes.append(date)
        self.files[date] = list(entries)

    def list_dates(self) -> list[str]:
        return sorted(self.files)


@dataclass
class FakeClock:
    """Clock that advances one minute per call."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 8, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(minutes=1)
        return value


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def food_store(food_repository: InMemoryFoodRepository) -> FoodStore:
    return FoodStore(food_repository)


@pytest.fixture
def log_repository() -> InMemoryDailyLogRepository:
    return InMemoryDailyLogRepository()


@pytest.fixture
def daily_log(log_repository: InMemoryDailyLogRepository) -> DailyLog:
    return DailyLog(repository=log_repository, clock=FakeClock())
