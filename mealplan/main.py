import logging

import uvicorn
from mealplan.api.api_run import app
from mealplan.infra.paths import DATA_DIR
from mealplan.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL


def run():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # Print a friendly message that points to the URL and the data folder in use
    print(f"Meal plan API on http://localhost:{APP_PORT} (Press CTRL+C to quit)")
    print(f"Plan and recipe files in: {DATA_DIR}")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
