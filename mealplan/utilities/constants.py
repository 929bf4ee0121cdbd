from typing import Final

DAYS: Final[tuple] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_MEALS: Final[tuple] = ("Lunch", "Dinner")
SEASONS: Final[tuple] = ("winter", "summer")

# Catalog file keys, one list per season
SEASON_KEYS: Final[dict[str, str]] = {"winter": "winter_recipes", "summer": "summer_recipes"}

PLAN_PREFIX: Final[str] = "MP_"
RECIPES_PREFIX: Final[str] = "recipes_"
BUNDLED_RECIPES_NAME: Final[str] = "recipes.json"
STEM_DATE_FORMAT: Final[str] = "%Y-%m-%d"

DEFAULT_SAVE_DEBOUNCE_MS: Final[int] = 800
