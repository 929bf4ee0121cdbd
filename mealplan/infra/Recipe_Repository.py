import logging
from datetime import date
from typing import Callable, List, Optional, Tuple

from mealplan.domain.Catalog import RecipeCatalog
from mealplan.infra.Blob_Store import BlobStore
from mealplan.infra.errors import StorageUnavailable
from mealplan.logic.planning.filenames import RECIPES_FILENAME_RE, recipes_filename
from mealplan.utilities.constants import BUNDLED_RECIPES_NAME

logger = logging.getLogger(__name__)


class RecipeRepository:
    """Dated recipe catalog snapshots (recipes_YYYY-MM-DD.json) in the blob store."""

    def __init__(self, store: BlobStore, clock: Callable[[], date] = date.today):
        self._store = store
        self._clock = clock

    def list_catalog_files(self) -> List[str]:
        """Dated catalog files, newest first."""
        return sorted(self._store.list(RECIPES_FILENAME_RE), reverse=True)

    def load_latest(self) -> Tuple[RecipeCatalog, Optional[str]]:
        """Read the newest snapshot, falling back to the bundled recipes.json.

        Returns (catalog, source filename); an empty catalog and None when nothing is readable.
        """
        try:
            candidates = self.list_catalog_files() + [BUNDLED_RECIPES_NAME]
            for filename in candidates:
                data = self._store.read(filename)
                if data is not None:
                    catalog = RecipeCatalog.from_dict(data)
                    logger.info("Loaded %d recipes from %s", len(catalog), filename)
                    return catalog, filename
        except StorageUnavailable as e:
            logger.error("Recipe catalog unavailable: %s", e)
            return RecipeCatalog(), None
        logger.warning("No recipe catalog found. Starting with an empty catalog.")
        return RecipeCatalog(), None

    def save(self, catalog: RecipeCatalog) -> str:
        """Write today's snapshot (same-day saves overwrite). Store errors propagate."""
        filename = recipes_filename(self._clock())
        self._store.write(filename, catalog.to_dict())
        logger.info("Saved %d recipes as %s", len(catalog), filename)
        return filename
