"""Picker filter state per (day, meal). Kept in memory only; consumed by auto-fill."""
from typing import Dict, Iterable, Optional, Tuple

from mealplan.utilities.constants import SEASONS


class SlotFilter:
    def __init__(self, season: str = "winter", sections: Optional[Iterable[str]] = None,
                 tags: Optional[Iterable[str]] = None, search_text: str = ""):
        self.season = season if season in SEASONS else "winter"
        self.sections = set(sections or [])
        self.tags = set(tags or [])
        self.search_text = (search_text or "").strip()

    def __repr__(self) -> str:
        return (f"SlotFilter(season={self.season!r}, sections={sorted(self.sections)}, "
                f"tags={sorted(self.tags)}, search_text={self.search_text!r})")


class FilterState:
    def __init__(self):
        self._filters: Dict[Tuple[str, str], SlotFilter] = {}

    def set(self, day: str, meal: str, slot_filter: SlotFilter):
        self._filters[(day, meal)] = slot_filter
        return self

    def get(self, day: str, meal: str) -> SlotFilter:
        '''Returns the filter for a slot; an unset slot has no section filter.'''
        return self._filters.get((day, meal), SlotFilter())

    def clear(self):
        self._filters.clear()

    def __len__(self) -> int:
        return len(self._filters)
