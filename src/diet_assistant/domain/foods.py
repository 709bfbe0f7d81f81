"""Domain models for basic and composite foods."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class FoodKind(Enum):
    """Tag distinguishing the two food variants."""

    BASIC = "basic"
    COMPOSITE = "composite"


class FoodNotFoundError(LookupError):
    """Raised when a mutation names a food that does not resolve."""


class InvalidFoodError(ValueError):
    """Raised when food data cannot be stored."""


@dataclass(frozen=True)
class BasicFood:
    """Leaf food with a fixed calorie value per serving."""

    identifier: str
    keywords: tuple[str, ...]
    calories_per_serving: float
    kind: FoodKind = field(default=FoodKind.BASIC, init=False)

    @property
    def is_composite(self) -> bool:
        return False

    def calculate_calories(self, servings: int) -> float:
        """Return calories for the given number of servings."""
        return self.calories_per_serving * servings


@dataclass(frozen=True)
class ComponentRef:
    """Key reference to a component food with its serving count."""

    food_id: str
    servings: int


@dataclass
class CompositeFood:
    """Food made of other foods, referenced by identifier.

    Components are resolved through ``lookup`` on every evaluation, so the
    owning store stays the single holder of food entities.
    ``calories_per_serving`` is a cache refreshed on each structural change;
    the store refreshes it again when a component food is replaced.
    """

    identifier: str
    keywords: tuple[str, ...]
    lookup: "FoodLookup" = field(repr=False, compare=False)
    components: dict[str, ComponentRef] = field(default_factory=dict)
    calories_per_serving: float = 0.0
    kind: FoodKind = field(default=FoodKind.COMPOSITE, init=False)

    @property
    def is_composite(self) -> bool:
        return True

    def add_component(self, food: "Food", servings: int) -> None:
        """Insert or overwrite a component and refresh the cached calories."""
        if isinstance(servings, bool) or not isinstance(servings, int):
            raise InvalidFoodError(f"Servings must be an integer: {servings!r}")
        if servings < 1:
            raise InvalidFoodError(f"Servings must be positive: {servings}")
        if self.lookup(food.identifier) is None:
            raise FoodNotFoundError(food.identifier)
        previous = self.components.get(food.identifier)
        self.components[food.identifier] = ComponentRef(food.identifier, servings)
        try:
            calories = self.calculate_calories(1)
        except RecursionError as exc:
            if previous is None:
                del self.components[food.identifier]
            else:
                self.components[food.identifier] = previous
            raise InvalidFoodError(
                f"{food.identifier} would make {self.identifier} contain itself"
            ) from exc
        self.calories_per_serving = calories

    def remove_component(self, food_id: str) -> None:
        """Remove a component if present and refresh the cached calories."""
        self.components.pop(food_id, None)
        self.refresh_calories()

    def refresh_calories(self) -> None:
        """Recompute the cached calories from the current components."""
        self.calories_per_serving = self.calculate_calories(1)

    def calculate_calories(self, servings: int) -> float:
        """Walk the component graph and return calories for ``servings``."""
        total = 0.0
        for ref in self.components.values():
            component = self.lookup(ref.food_id)
            if component is None:
                continue
            total += component.calculate_calories(ref.servings)
        return total * servings


Food = BasicFood | CompositeFood
FoodLookup = Callable[[str], Food | None]


def describe_food(food: Food) -> str:
    """Render a food as human-readable text."""
    keywords = ", ".join(food.keywords)
    match food:
        case BasicFood():
            return (
                f"Basic Food: {food.identifier}\n"
                f"Keywords: {keywords}\n"
                f"Calories per serving: {food.calories_per_serving:g}"
            )
        case CompositeFood():
            lines = [
                f"Composite Food: {food.identifier}",
                f"Keywords: {keywords}",
                "Components:",
            ]
            for ref in food.components.values():
                lines.append(f"  - {ref.food_id} ({ref.servings} servings)")
            lines.append(f"Total calories per serving: {food.calories_per_serving:g}")
            return "\n".join(lines)
    raise TypeError(f"Unsupported food type: {type(food).__name__}")
