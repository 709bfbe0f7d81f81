"""Per-day calorie summaries built from the daily log and food store."""

from dataclasses import dataclass

from diet_assistant.domain.foods import FoodLookup
from diet_assistant.domain.summaries import DaySummary, LoggedItem
from diet_assistant.services.daily_log import DailyLog


@dataclass
class DaySummaryService:
    """Joins a day's log entries with current food calories."""

    daily_log: DailyLog
    food_lookup: FoodLookup

    def summarize(self, date: str) -> DaySummary:
        """Return every entry for the date with its calories and the total."""
        items: list[LoggedItem] = []
        for index, entry in enumerate(self.daily_log.get_log(date)):
            food = self.food_lookup(entry.food_id)
            items.append(
                LoggedItem(
                    index=index,
                    food_id=entry.food_id,
                    servings=entry.servings,
                    timestamp=entry.timestamp,
                    calories=(
                        food.calculate_calories(entry.servings)
                        if food is not None
                        else None
                    ),
                )
            )
        return DaySummary(
            date=date,
            items=items,
            total_calories=self.daily_log.calculate_total_calories(
                date, self.food_lookup
            ),
        )
