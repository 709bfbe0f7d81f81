"""Domain models for per-day calorie summaries."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoggedItem:
    """A log entry joined with its food's calories."""

    index: int
    food_id: str
    servings: int
    timestamp: int
    calories: float | None


@dataclass(frozen=True)
class DaySummary:
    """Entries and total calories for one date."""

    date: str
    items: list[LoggedItem]
    total_calories: float
