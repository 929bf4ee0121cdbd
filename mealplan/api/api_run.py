from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional, Sequence
import logging
import threading

from fastapi import FastAPI

from mealplan.events.Event_Bus import GLOBAL_EVENT_BUS, EventBus
from mealplan.events.web_observers import start as start_event_observers
from mealplan.infra.Blob_Store import BlobStore, FileBlobStore
from mealplan.infra.paths import DATA_DIR
from mealplan.infra.Recipe_Repository import RecipeRepository
from mealplan.logic.sync.engine import PlanSyncEngine
from mealplan.utilities.config import MEAL_SLOTS, SAVE_DEBOUNCE_MS

# Routers
from mealplan.api.routes import events, plans, recipes

# Logging
logger = logging.getLogger("mealplan_app")


def create_app(store: Optional[BlobStore] = None,
               meals: Sequence[str] = MEAL_SLOTS,
               debounce_seconds: float = SAVE_DEBOUNCE_MS / 1000.0,
               clock: Callable[[], date] = date.today,
               event_bus: Optional[EventBus] = None,
               timer_factory: Callable = threading.Timer) -> FastAPI:
    """Build the API. One plan engine session lives for the lifetime of the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        blob_store = store or FileBlobStore(DATA_DIR)
        bus = event_bus or GLOBAL_EVENT_BUS
        start_event_observers(bus)
        repo = RecipeRepository(blob_store, clock)
        catalog, source = repo.load_latest()
        engine = PlanSyncEngine(
            blob_store, catalog,
            meals=meals, debounce_seconds=debounce_seconds, clock=clock,
            event_bus=bus, timer_factory=timer_factory,
        )
        engine.open()
        app.state.engine = engine
        app.state.recipes = repo
        app.state.catalog_source = source
        logger.info("Meal plan session started with %r (active plan %s)", blob_store, engine.active_filename)
        try:
            yield
        finally:
            if not engine.close():
                logger.error("Unsaved edits in %s could not be written on shutdown", engine.active_filename)

    app = FastAPI(title="Meal Plan API", lifespan=lifespan)
    app.include_router(plans.router)
    app.include_router(recipes.router)
    app.include_router(events.router)
    return app


app = create_app()
