"""Validated shapes of persisted food and log records."""

import math

from pydantic import BaseModel, Field, field_validator


class BasicFoodRecord(BaseModel):
    """One line of the basic-food resource."""

    identifier: str = Field(min_length=1)
    calories_per_serving: float = Field(ge=0.0)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("calories_per_serving")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("calories must be finite")
        return value


class ComponentRecord(BaseModel):
    """Component line inside a composite-food block."""

    food_id: str = Field(min_length=1)
    servings: int = Field(gt=0)


class CompositeFoodRecord(BaseModel):
    """A composite-food block: header plus component lines."""

    identifier: str = Field(min_length=1)
    keywords: list[str] = Field(default_factory=list)
    components: list[ComponentRecord] = Field(default_factory=list)


class LogEntryRecord(BaseModel):
    """One line of a daily-log resource."""

    food_id: str = Field(min_length=1)
    servings: int
    timestamp: int
