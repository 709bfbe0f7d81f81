"""Application configuration."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path("data")
    basic_foods_file: str = "basic_foods.txt"
    composite_foods_file: str = "composite_foods.txt"
    daily_logs_dir: str = "daily_logs"
    undo_limit: int | None = Field(default=None, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def basic_foods_path(self) -> Path:
        return self.data_dir / self.basic_foods_file

    @property
    def composite_foods_path(self) -> Path:
        return self.data_dir / self.composite_foods_file

    @property
    def daily_logs_path(self) -> Path:
        return self.data_dir / self.daily_logs_dir
