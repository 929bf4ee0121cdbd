"""Recipe domain entity: catalog record copied into plan slots when selected."""
from typing import Iterable, List, Optional

from mealplan.domain.Ingredient import Ingredient
from mealplan.utilities.constants import SEASONS


def _clean_tags(tags) -> List[str]:
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, (list, tuple, set)):
        return []
    seen = []
    for t in tags:
        if isinstance(t, str) and t.strip() and t.strip() not in seen:
            seen.append(t.strip())
    return seen


class Recipe:
    def __init__(self, name: str = "", section: str = "", tags: Optional[List[str]] = None,
                 ingredients: Optional[List[Ingredient]] = None, recipe_number: Optional[int] = None,
                 recipe_link: str = "", season: str = "winter"):
        if season not in SEASONS:
            raise ValueError(f"Unknown season: {season}")
        self.name = name
        self.section = section
        self.tags = _clean_tags(tags)
        self.ingredients = ingredients[:] if ingredients else []
        self.recipe_number = recipe_number
        self.recipe_link = recipe_link
        self.season = season

    def __str__(self) -> str:
        num = f"#{self.recipe_number} " if self.recipe_number is not None else ""
        return f"{num}{self.name} [{self.season}/{self.section}] - Tags: {', '.join(self.tags)}"

    __repr__ = __str__

    def has_any_tag(self, tags: Iterable[str]) -> bool:
        return any(t in self.tags for t in tags)

    def matches_search(self, text: str) -> bool:
        """Case-insensitive substring match on the name; empty text matches everything."""
        return not text or text.lower() in self.name.lower()

    @staticmethod
    def from_dict(data, season: str = "winter"):
        d = data if isinstance(data, dict) else {}
        number = d.get("recipe_number")
        try:
            number = int(number) if number not in (None, "") else None
        except (TypeError, ValueError):
            number = None
        name = d.get("name")
        section = d.get("section")
        link = d.get("recipe_link")
        ingredients = d.get("ingredients")
        return Recipe(
            name=name.strip() if isinstance(name, str) else "",
            section=section.strip() if isinstance(section, str) else "",
            tags=d.get("tags"),
            ingredients=[ing for ing in (Ingredient.from_dict(i) for i in ingredients) if ing.name]
            if isinstance(ingredients, list) else [],
            recipe_number=number,
            recipe_link=link.strip() if isinstance(link, str) else "",
            season=season,
        )

    def to_dict(self):
        """Catalog form: the season is implied by the list the record sits in."""
        d = {
            "name": self.name,
            "section": self.section,
            "tags": list(self.tags),
            "ingredients": [ing.to_dict() for ing in self.ingredients],
        }
        if self.recipe_number is not None:
            d["recipe_number"] = self.recipe_number
        if self.recipe_link:
            d["recipe_link"] = self.recipe_link
        return d

    def to_ref(self):
        """Denormalized copy stored inside a plan slot."""
        d = self.to_dict()
        d["season"] = self.season
        return d
