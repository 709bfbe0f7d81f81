"""Food store: basic and composite foods with search and persistence."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from diet_assistant.domain.foods import (
    BasicFood,
    CompositeFood,
    Food,
    FoodNotFoundError,
    InvalidFoodError,
)
from diet_assistant.domain.records import (
    BasicFoodRecord,
    ComponentRecord,
    CompositeFoodRecord,
)

_FORBIDDEN_IN_IDENTIFIER = ("|", "\n", "\r")
_FORBIDDEN_IN_KEYWORD = (",", "|", "\n", "\r")
_RESERVED_IDENTIFIERS = {"---"}

_logger = logging.getLogger(__name__)


class FoodInUseError(ValueError):
    """Raised when removing a food that composite foods still reference."""


class FoodRepository(Protocol):
    """Persistence interface for the food store."""

    def load_basic_foods(self) -> list[BasicFoodRecord]:
        """Return basic-food records in stored order."""

    def load_composite_foods(self) -> list[CompositeFoodRecord]:
        """Return composite-food records in stored order."""

    def save_basic_foods(self, records: list[BasicFoodRecord]) -> None:
        """Replace the stored basic foods."""

    def save_composite_foods(self, records: list[CompositeFoodRecord]) -> None:
        """Replace the stored composite foods."""


@dataclass
class FoodStore:
    """Owns every food entity; composites reference components by identifier.

    Basic and composite foods live in separate namespaces. Nothing prevents
    the same identifier in both; lookups resolve the basic food first.
    Iteration, search results and saved output are ordered by identifier,
    basic foods before composite foods.
    """

    repository: FoodRepository
    _basic: dict[str, BasicFood] = field(default_factory=dict, init=False, repr=False)
    _composite: dict[str, CompositeFood] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self.load()

    def add_basic_food(
        self, identifier: str, keywords: Iterable[str], calories_per_serving: float
    ) -> BasicFood:
        """Create or overwrite a basic food."""
        calories = float(calories_per_serving)
        if not math.isfinite(calories) or calories < 0:
            raise InvalidFoodError(
                f"Invalid calories per serving: {calories_per_serving}"
            )
        food = BasicFood(
            identifier=_clean_identifier(identifier),
            keywords=_clean_keywords(keywords),
            calories_per_serving=calories,
        )
        self._basic[food.identifier] = food
        self._refresh_dependents(food.identifier)
        return food

    def add_composite_food(
        self, identifier: str, keywords: Iterable[str]
    ) -> CompositeFood:
        """Create or overwrite an empty composite food."""
        food = CompositeFood(
            identifier=_clean_identifier(identifier),
            keywords=_clean_keywords(keywords),
            lookup=self.get_food,
        )
        self._composite[food.identifier] = food
        self._refresh_dependents(food.identifier)
        return food

    def add_component(
        self, composite_id: str, component_id: str, servings: int
    ) -> CompositeFood:
        """Add a component to a stored composite food by identifiers."""
        composite = self._require_composite(composite_id)
        component = self.get_food(component_id)
        if component is None:
            raise FoodNotFoundError(component_id)
        composite.add_component(component, servings)
        self._refresh_dependents(composite_id)
        return composite

    def remove_component(self, composite_id: str, component_id: str) -> CompositeFood:
        """Remove a component from a stored composite food."""
        composite = self._require_composite(composite_id)
        composite.remove_component(component_id)
        self._refresh_dependents(composite_id)
        return composite

    def get_basic_food(self, identifier: str) -> BasicFood | None:
        return self._basic.get(identifier)

    def get_composite_food(self, identifier: str) -> CompositeFood | None:
        return self._composite.get(identifier)

    def get_food(self, identifier: str) -> Food | None:
        """Return the food for an identifier, preferring the basic namespace."""
        basic = self._basic.get(identifier)
        if basic is not None:
            return basic
        return self._composite.get(identifier)

    def all_foods(self) -> list[Food]:
        """Return basic then composite foods, each sorted by identifier."""
        return [*self._sorted_basic(), *self._sorted_composite()]

    def search_foods(self, keywords: list[str], match_all: bool = True) -> list[Food]:
        """Return foods whose keywords match the query, case-insensitively.

        With ``match_all`` every query keyword must match one of the food's
        keywords, so an empty query returns everything. Otherwise a single
        matching keyword is enough, so an empty query returns nothing.
        """
        return [
            food
            for food in self.all_foods()
            if _matches(food.keywords, keywords, match_all)
        ]

    def search_basic_foods(
        self, keywords: list[str], match_all: bool = True
    ) -> list[BasicFood]:
        return [
            food
            for food in self._sorted_basic()
            if _matches(food.keywords, keywords, match_all)
        ]

    def search_composite_foods(
        self, keywords: list[str], match_all: bool = True
    ) -> list[CompositeFood]:
        return [
            food
            for food in self._sorted_composite()
            if _matches(food.keywords, keywords, match_all)
        ]

    def referencing(self, identifier: str) -> list[CompositeFood]:
        """Return composite foods that list ``identifier`` as a component."""
        return [
            food
            for food in self._sorted_composite()
            if food.identifier != identifier and identifier in food.components
        ]

    def remove_food(self, identifier: str) -> Food | None:
        """Remove a food unless another composite still references it."""
        users = self.referencing(identifier)
        if users:
            names = ", ".join(food.identifier for food in users)
            raise FoodInUseError(f"{identifier} is a component of: {names}")
        if identifier in self._basic:
            return self._basic.pop(identifier)
        return self._composite.pop(identifier, None)

    def save(self) -> None:
        """Persist both namespaces in identifier order."""
        self.repository.save_basic_foods(
            [
                BasicFoodRecord(
                    identifier=food.identifier,
                    calories_per_serving=food.calories_per_serving,
                    keywords=list(food.keywords),
                )
                for food in self._sorted_basic()
            ]
        )
        self.repository.save_composite_foods(
            [
                CompositeFoodRecord(
                    identifier=food.identifier,
                    keywords=list(food.keywords),
                    components=[
                        ComponentRecord(food_id=ref.food_id, servings=ref.servings)
                        for _, ref in sorted(food.components.items())
                    ],
                )
                for food in self._sorted_composite()
            ]
        )

    def load(self) -> None:
        """Replace the in-memory foods with the repository contents.

        Composite components resolve only against basic foods and composites
        that appear earlier in the stored order; anything else is dropped.
        """
        self._basic.clear()
        self._composite.clear()
        for record in self.repository.load_basic_foods():
            self._basic[record.identifier] = BasicFood(
                identifier=record.identifier,
                keywords=tuple(record.keywords),
                calories_per_serving=record.calories_per_serving,
            )
        for record in self.repository.load_composite_foods():
            composite = CompositeFood(
                identifier=record.identifier,
                keywords=tuple(record.keywords),
                lookup=self.get_food,
            )
            for component in record.components:
                food = self.get_food(component.food_id)
                if food is None:
                    _logger.warning(
                        "Dropping unresolved component %s of %s",
                        component.food_id,
                        record.identifier,
                    )
                    continue
                composite.add_component(food, component.servings)
            self._composite[record.identifier] = composite
        _logger.info(
            "Loaded %s basic and %s composite foods",
            len(self._basic),
            len(self._composite),
        )

    def _require_composite(self, identifier: str) -> CompositeFood:
        composite = self._composite.get(identifier)
        if composite is None:
            raise FoodNotFoundError(identifier)
        return composite

    def _refresh_dependents(self, identifier: str) -> None:
        """Refresh cached calories of composites that use ``identifier``.

        Each composite is refreshed only after the dependents it contains.
        """
        pending: dict[str, CompositeFood] = {}
        queue = [identifier]
        while queue:
            for food in self.referencing(queue.pop()):
                if food.identifier not in pending:
                    pending[food.identifier] = food
                    queue.append(food.identifier)

        def refresh(food: CompositeFood) -> None:
            if pending.pop(food.identifier, None) is None:
                return
            for food_id in food.components:
                inner = pending.get(food_id)
                if inner is not None:
                    refresh(inner)
            food.refresh_calories()

        while pending:
            refresh(next(iter(pending.values())))

    def _sorted_basic(self) -> list[BasicFood]:
        return [self._basic[key] for key in sorted(self._basic)]

    def _sorted_composite(self) -> list[CompositeFood]:
        return [self._composite[key] for key in sorted(self._composite)]


def _matches(food_keywords: Iterable[str], query: list[str], match_all: bool) -> bool:
    available = {keyword.casefold() for keyword in food_keywords}
    if match_all:
        return all(keyword.casefold() in available for keyword in query)
    return any(keyword.casefold() in available for keyword in query)


def _clean_identifier(identifier: str) -> str:
    cleaned = identifier.strip()
    if not cleaned:
        raise InvalidFoodError("Food identifier must not be empty")
    if cleaned in _RESERVED_IDENTIFIERS or any(
        char in cleaned for char in _FORBIDDEN_IN_IDENTIFIER
    ):
        raise InvalidFoodError(f"Invalid food identifier: {identifier!r}")
    return cleaned


def _clean_keywords(keywords: Iterable[str]) -> tuple[str, ...]:
    cleaned: list[str] = []
    for keyword in keywords:
        value = keyword.strip()
        if not value:
            continue
        if any(char in value for char in _FORBIDDEN_IN_KEYWORD):
            raise InvalidFoodError(f"Invalid keyword: {keyword!r}")
        cleaned.append(value)
    return tuple(cleaned)
