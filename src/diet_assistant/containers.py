"""Dependency container wiring for the application."""

from dataclasses import dataclass

from diet_assistant.adapters.text_food_repository import TextFoodRepository
from diet_assistant.adapters.text_log_repository import TextDailyLogRepository
from diet_assistant.config import Settings
from diet_assistant.services.daily_log import DailyLog
from diet_assistant.services.foods import FoodStore
from diet_assistant.services.summaries import DaySummaryService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    username: str
    food_store: FoodStore
    daily_log: DailyLog
    summary_service: DaySummaryService


def build_container(
    settings: Settings | None = None, username: str = ""
) -> AppContainer:
    """Create the default dependency container for one user session."""
    resolved_settings = settings or Settings()
    food_repository = TextFoodRepository(
        basic_path=resolved_settings.basic_foods_path,
        composite_path=resolved_settings.composite_foods_path,
    )
    log_repository = TextDailyLogRepository.for_user(
        resolved_settings.daily_logs_path, username
    )
    food_store = FoodStore(food_repository)
    daily_log = DailyLog(
        repository=log_repository,
        undo_limit=resolved_settings.undo_limit,
    )
    summary_service = DaySummaryService(
        daily_log=daily_log,
        food_lookup=food_store.get_food,
    )
    return AppContainer(
        settings=resolved_settings,
        username=username,
        food_store=food_store,
        daily_log=daily_log,
        summary_service=summary_service,
    )
