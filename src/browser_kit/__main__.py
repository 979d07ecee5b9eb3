"""Process entry point: ``python -m browser_kit`` or ``browser-kit``."""
import logging

import uvicorn

from .config import Settings
from .server.app import create_app


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app(settings=settings)
    logging.getLogger(__name__).info("Browser session service listening on %s:%d", settings.host, settings.port)
    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes every session.
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
