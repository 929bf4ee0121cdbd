import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from mealplan.api.deps import get_engine, get_recipe_repository
from mealplan.domain.Catalog import RecipeCatalog
from mealplan.infra.errors import PlanStoreError
from mealplan.infra.Recipe_Repository import RecipeRepository
from mealplan.logic.sync.engine import PlanSyncEngine
from mealplan.utilities.validators import CatalogInput

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/recipes")
def list_recipes(request: Request, engine: PlanSyncEngine = Depends(get_engine)):
    """Return the session catalog and the file it came from."""
    payload = {"source": request.app.state.catalog_source}
    payload.update(engine.catalog.to_dict())
    return payload


@router.put("/recipes")
def save_recipes(body: CatalogInput, request: Request,
                 engine: PlanSyncEngine = Depends(get_engine),
                 repo: RecipeRepository = Depends(get_recipe_repository)):
    """Save a catalog snapshot for today and refresh recipe copies in open plans."""
    catalog = RecipeCatalog.from_dict(body.model_dump(exclude_none=True))
    try:
        filename = repo.save(catalog)
    except PlanStoreError as e:
        logger.error("Saving recipes failed: %s", e)
        raise HTTPException(status_code=503, detail=f"Recipes could not be saved: {e}")
    request.app.state.catalog_source = filename
    refreshed = engine.on_recipes_saved(catalog, filename)
    return {"filename": filename, "count": len(catalog), "slots_refreshed": refreshed}
