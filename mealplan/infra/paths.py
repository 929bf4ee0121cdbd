from pathlib import Path

from mealplan.utilities.config import DATA_DIR as _CONFIGURED_DATA_DIR

# Centralized data directory (single source of truth); every plan and catalog file lives here
DATA_DIR = Path(_CONFIGURED_DATA_DIR).resolve()

__all__ = ['DATA_DIR']
