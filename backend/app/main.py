from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.db_init import router as db_init_router
from app.api.health import router as health_router
from app.core.config import Settings, settings
from app.core.database import ConnectionProvider, QueryExecutor
from app.core.logging import configure_logging
from app.services.schema_bootstrap import SchemaBootstrapper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    provider: ConnectionProvider = app.state.provider
    if provider.settings.DB_BOOTSTRAP_ON_STARTUP:
        bootstrapper = SchemaBootstrapper(QueryExecutor(provider))
        if await bootstrapper.setup():
            logger.info("Database bootstrap on startup finished")
        else:
            logger.error("Database bootstrap on startup failed")
    try:
        yield
    finally:
        await provider.dispose()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(title="Photo Gallery", version="1.0.0", lifespan=lifespan)
    app.state.provider = ConnectionProvider(app_settings)

    app.include_router(db_init_router)
    app.include_router(health_router)
    return app


app = create_app()
