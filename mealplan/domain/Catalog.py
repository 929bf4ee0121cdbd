"""Recipe catalog aggregate: the two seasonal recipe collections."""
from typing import Dict, Iterator, List, Optional

from mealplan.domain.Recipe import Recipe
from mealplan.utilities.constants import SEASONS, SEASON_KEYS


class RecipeCatalog:
    def __init__(self, winter: Optional[List[Recipe]] = None, summer: Optional[List[Recipe]] = None):
        self._by_season: Dict[str, List[Recipe]] = {
            "winter": list(winter or []),
            "summer": list(summer or []),
        }

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_season.values())

    def __iter__(self) -> Iterator[Recipe]:
        for season in SEASONS:
            yield from self._by_season[season]

    def __str__(self) -> str:
        return f"RecipeCatalog(winter={len(self.pool('winter'))}, summer={len(self.pool('summer'))})"

    __repr__ = __str__

    def pool(self, season: str) -> List[Recipe]:
        '''Returns the recipes of one season (empty list for unknown seasons).'''
        return list(self._by_season.get(season, []))

    def find_by_name(self, name: str) -> Optional[Recipe]:
        '''Exact, case-sensitive name lookup across winter then summer.'''
        if not isinstance(name, str) or not name:
            return None
        for recipe in self:
            if recipe.name == name:
                return recipe
        return None

    @staticmethod
    def from_dict(data):
        '''Builds a catalog from {"winter_recipes": [...], "summer_recipes": [...]}. Never raises.'''
        d = data if isinstance(data, dict) else {}
        lists = {}
        for season in SEASONS:
            entries = d.get(SEASON_KEYS[season])
            if not isinstance(entries, list):
                entries = []
            lists[season] = [Recipe.from_dict(e, season) for e in entries if isinstance(e, dict)]
        return RecipeCatalog(lists["winter"], lists["summer"])

    def to_dict(self):
        return {SEASON_KEYS[s]: [r.to_dict() for r in self._by_season[s]] for s in SEASONS}
