"""Plan domain entity: the weekly day x meal grid of MealSlots."""
import logging
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from mealplan.domain.MealSlot import MealSlot
from mealplan.domain.Recipe import Recipe
from mealplan.utilities.constants import DAYS, DEFAULT_MEALS

logger = logging.getLogger(__name__)


def _slot_from_raw(value: Any, day: str = "", meal: str = "") -> MealSlot:
    if isinstance(value, dict) and isinstance(value.get("name"), str) and value.get("name"):
        return MealSlot(value)
    if value is not None:
        logger.debug("Dropping %s/%s value without a recipe name: %r", day, meal, value)
    return MealSlot()


class PlanRecord:
    def __init__(self, meals: Sequence[str] = DEFAULT_MEALS):
        self.days = DAYS
        self.meals = tuple(meals)
        # Every (day, meal) pair is always present
        self.grid: Dict[str, Dict[str, MealSlot]] = {
            day: {meal: MealSlot() for meal in self.meals} for day in self.days
        }

    @classmethod
    def empty(cls, meals: Sequence[str] = DEFAULT_MEALS) -> "PlanRecord":
        return cls(meals)

    @classmethod
    def normalize(cls, raw: Any, meals: Sequence[str] = DEFAULT_MEALS) -> "PlanRecord":
        """Build a full grid from whatever was stored. Pure and total.

        Missing days/meals and null or non-recipe values become empty slots;
        keys outside the configured grid (e.g. an old Breakfast slot) are dropped.
        """
        plan = cls(meals)
        if not isinstance(raw, dict):
            return plan
        for day in plan.days:
            day_raw = raw.get(day)
            if not isinstance(day_raw, dict):
                continue
            for meal in plan.meals:
                plan.grid[day][meal] = _slot_from_raw(day_raw.get(meal), day, meal)
        return plan

    def _check(self, day: str, meal: str):
        if day not in self.grid:
            raise ValueError(f"Unknown day: {day!r}")
        if meal not in self.grid[day]:
            raise ValueError(f"Unknown meal slot: {meal!r}")

    def get(self, day: str, meal: str) -> MealSlot:
        self._check(day, meal)
        return self.grid[day][meal]

    def set(self, day: str, meal: str, recipe=None) -> bool:
        """Assign a recipe copy (Recipe or dict) or clear the slot (None). Returns True if it changed."""
        self._check(day, meal)
        if recipe is None:
            new_slot = MealSlot()
        elif isinstance(recipe, Recipe):
            new_slot = MealSlot(recipe.to_ref())
        elif isinstance(recipe, dict) and isinstance(recipe.get("name"), str) and recipe.get("name"):
            new_slot = MealSlot(recipe)
        else:
            raise ValueError("A recipe reference needs a non-empty 'name'")
        changed = new_slot != self.grid[day][meal]
        self.grid[day][meal] = new_slot
        return changed

    def slots(self) -> Iterator[Tuple[str, str, MealSlot]]:
        for day in self.days:
            for meal in self.meals:
                yield day, meal, self.grid[day][meal]

    def filled_count(self, day: Optional[str] = None) -> int:
        return sum(1 for d, _, slot in self.slots() if not slot.is_empty and (day is None or d == day))

    def to_dict(self):
        return {day: {meal: self.grid[day][meal].to_dict() for meal in self.meals} for day in self.days}

    def copy(self) -> "PlanRecord":
        return PlanRecord.normalize(self.to_dict(), self.meals)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlanRecord):
            return NotImplemented
        return self.meals == other.meals and self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        return f"PlanRecord({self.filled_count()}/{len(self.days) * len(self.meals)} filled)"

    __repr__ = __str__
