import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from cms_requirements.config import settings
from cms_requirements.exception_handlers import register_exception_handlers
from cms_requirements.logging_config import setup_logging
from cms_requirements.plugins.loader import configured_plugin_classes, initialize_plugins
from cms_requirements.plugins.registry import plugin_registry
from cms_requirements.routes.requirements import router as requirements_router

setup_logging(settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check plugin requirements and load plugins before serving requests."""
    logger.info("Starting up the application...")
    loaded = await initialize_plugins(plugin_registry, configured_plugin_classes())
    logger.info("Active plugins: %s", ", ".join(loaded) or "none")
    yield
    for plugin in plugin_registry.all_plugins():
        await plugin.on_unload()
    logger.info("Shutting down the application...")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Plugin requirement checks for the CMS host",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.include_router(requirements_router, prefix="/api/v1/plugins", tags=["Plugins"])

    if settings.debug:
        logger.info("Running in %s mode", settings.environment)

    return app


app = create_app()


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the CMS API"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
