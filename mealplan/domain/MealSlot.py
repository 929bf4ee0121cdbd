"""MealSlot: one (day, meal) cell of a plan.

A filled slot holds a denormalized copy of the recipe as it was when picked,
so a plan stays readable after the catalog entry is edited or deleted. The
copy is a stale-tolerant cache: refresh() is the only path that replaces it
with catalog data, and a miss leaves the old copy in place.
"""
import copy
from typing import Any, Dict, Optional


class MealSlot:
    __slots__ = ("recipe",)

    def __init__(self, recipe: Optional[Dict[str, Any]] = None):
        self.recipe = copy.deepcopy(recipe) if recipe else None

    @property
    def is_empty(self) -> bool:
        return self.recipe is None

    @property
    def name(self) -> str:
        return self.recipe.get("name", "") if self.recipe else ""

    def refresh(self, catalog) -> bool:
        """Replace the cached copy with the catalog record of the same name. Returns True if it changed."""
        if self.recipe is None:
            return False
        fresh = catalog.find_by_name(self.name)
        if fresh is None:
            return False
        ref = fresh.to_ref()
        if ref == self.recipe:
            return False
        self.recipe = ref
        return True

    def to_dict(self):
        return copy.deepcopy(self.recipe) if self.recipe else None

    def __eq__(self, other) -> bool:
        if not isinstance(other, MealSlot):
            return NotImplemented
        return self.recipe == other.recipe

    def __repr__(self) -> str:
        return f"MealSlot({self.name!r})" if self.recipe else "MealSlot(empty)"
