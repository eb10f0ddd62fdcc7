"""Run the ClipMosaic API: ``python serve.py`` from the backend directory."""

import logging
import os

import uvicorn
from dotenv import load_dotenv

from app.config import Settings
from app.main import create_app

# Load .env from backend dir (where serve.py runs)
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = create_app(settings)
    for route in app.routes:
        if hasattr(route, "path") and hasattr(route, "methods"):
            logging.info("App route: %s %s", sorted(route.methods) if route.methods else "GET", route.path)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
