"""Console entry points: ``stt-starter`` (API) and ``stt-starter-frontend``."""

import logging
import sys

import uvicorn

from .config import MissingApiKeyError, load_settings
from .logging_config import setup_logging
from .main import create_app, create_frontend_app

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the API server on ``HOST:PORT``. Exits with status 1 without an API key."""
    settings = load_settings()
    setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)
    try:
        app = create_app(settings)
    except MissingApiKeyError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


def frontend_main() -> None:
    """Serve only the static frontend on ``HOST:FRONTEND_PORT``."""
    settings = load_settings()
    setup_logging(settings.LOG_DIR, settings.LOG_LEVEL)
    app = create_frontend_app(settings)
    logger.info("Frontend server running at http://%s:%d", settings.HOST, settings.FRONTEND_PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.FRONTEND_PORT, log_config=None)
