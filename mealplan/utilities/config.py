"""Configuration management for the meal plan application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

from mealplan.utilities.constants import DEFAULT_MEALS, DEFAULT_SAVE_DEBOUNCE_MS

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _meal_slots(raw: str) -> tuple:
    slots = tuple(s.strip() for s in raw.split(',') if s.strip())
    return slots or DEFAULT_MEALS


# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Plan engine
SAVE_DEBOUNCE_MS: Final[int] = int(os.getenv('SAVE_DEBOUNCE_MS', str(DEFAULT_SAVE_DEBOUNCE_MS)))
MEAL_SLOTS: Final[tuple] = _meal_slots(os.getenv('MEAL_SLOTS', ','.join(DEFAULT_MEALS)))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('MEALPLAN_DATA_DIR', str(BASE_DIR / 'data'))).expanduser()
