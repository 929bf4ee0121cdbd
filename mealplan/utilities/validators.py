"""
Input validation schemas using Pydantic for the plan and catalog API.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional, Union, Any

from mealplan.logic.planning.filenames import PLAN_FILENAME_RE

DAY_PATTERN = r'^(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)$'


class SlotUpdateInput(BaseModel):
    """Schema for assigning or clearing one plan slot."""
    day: str = Field(..., pattern=DAY_PATTERN)
    meal: str = Field(..., min_length=1)
    recipe: Optional[Dict[str, Any]] = None

    @field_validator('recipe')
    @classmethod
    def validate_recipe(cls, v):
        """A recipe reference must carry a name."""
        if v is not None and not (isinstance(v.get('name'), str) and v['name'].strip()):
            raise ValueError("Recipe reference needs a non-empty 'name'")
        return v


class SelectPlanInput(BaseModel):
    """Schema for switching the active plan file."""
    filename: str = Field(..., pattern=PLAN_FILENAME_RE.pattern)


class IngredientInput(BaseModel):
    """Schema for ingredient input validation."""
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[str] = None

    @field_validator('name')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip()


class RecipeInput(BaseModel):
    """Schema for recipe input validation."""
    name: str = Field(..., min_length=1, max_length=200)
    section: str = ""
    tags: List[str] = Field(default_factory=list)
    ingredients: List[Union[IngredientInput, str]] = Field(default_factory=list)
    recipe_number: Optional[int] = Field(None, ge=0)
    recipe_link: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate recipe name."""
        if not v.strip():
            raise ValueError('Recipe name cannot be empty')
        return v.strip()

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        """Ensure tags are non-empty strings."""
        return [tag.strip() for tag in v if tag and tag.strip()]

    @field_validator('ingredients')
    @classmethod
    def drop_blank_ingredients(cls, v):
        """Legacy string ingredients may be blank lines from the editor."""
        return [i for i in v if not (isinstance(i, str) and not i.strip())]


class CatalogInput(BaseModel):
    """Schema for a full catalog save."""
    winter_recipes: List[RecipeInput] = Field(default_factory=list)
    summer_recipes: List[RecipeInput] = Field(default_factory=list)


class SlotFilterInput(BaseModel):
    """Picker filter for one (day, meal) slot."""
    day: str = Field(..., pattern=DAY_PATTERN)
    meal: str = Field(..., min_length=1)
    season: str = Field('winter', pattern=r'^(winter|summer)$')
    sections: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    search: str = ""


class AutoFillInput(BaseModel):
    """Schema for an auto-fill request."""
    filters: List[SlotFilterInput] = Field(default_factory=list)
