from fastapi import Request

from mealplan.infra.Recipe_Repository import RecipeRepository
from mealplan.logic.sync.engine import PlanSyncEngine


def get_engine(request: Request) -> PlanSyncEngine:
    """The session's plan engine, created at application startup."""
    return request.app.state.engine


def get_recipe_repository(request: Request) -> RecipeRepository:
    return request.app.state.recipes
