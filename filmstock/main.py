import uvicorn

from filmstock.api.api_run import create_app
from filmstock.logic.inventory_service import build_service
from filmstock.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL
from filmstock.utilities.logging_setup import configure_logging


if __name__ == "__main__":
    configure_logging(LOG_LEVEL)
    app = create_app(build_service())
    # Print a friendly message that points to the URL you can open in a browser
    print(f"FilmStock API running on http://{APP_HOST}:{APP_PORT} (Press CTRL+C to quit)")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT, log_level=LOG_LEVEL.lower())
