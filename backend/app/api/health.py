from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from importlib import metadata

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.pool import AsyncAdaptedQueuePool

from app.core.config import Settings
from app.core.database import ConnectionProvider, build_engine, get_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

HEALTH_CHECK_TIMEOUT_SECONDS = 5
_PROCESS_STARTED_AT = time.monotonic()


def _app_version() -> str:
    try:
        return metadata.version("photo-gallery")
    except metadata.PackageNotFoundError:
        return "unknown"


async def _probe_database(settings: Settings) -> tuple[str, int | None]:
    if not settings.POSTGRES_URL:
        return "not_configured", None

    started = time.perf_counter()
    engine = None
    try:
        # Throwaway pool with short timeouts so a slow store cannot stall the probe.
        engine = build_engine(
            settings.POSTGRES_URL,
            settings,
            connect_timeout=HEALTH_CHECK_TIMEOUT_SECONDS,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=1,
            max_overflow=0,
            pool_timeout=HEALTH_CHECK_TIMEOUT_SECONDS,
            pool_recycle=HEALTH_CHECK_TIMEOUT_SECONDS,
        )
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return "connected", round((time.perf_counter() - started) * 1000)
    except Exception:
        logger.exception("Database health check failed")
        return "error", None
    finally:
        if engine is not None:
            await engine.dispose()


@router.get("/health")
async def health(provider: ConnectionProvider = Depends(get_provider)):
    settings = provider.settings
    db_status, db_latency = await _probe_database(settings)
    connected = db_status == "connected"

    payload = {
        "status": "ok" if connected else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": _app_version(),
        "name": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "uptime": time.monotonic() - _PROCESS_STARTED_AT,
        "database": {
            "status": db_status,
            "latency": db_latency,
        },
    }
    return JSONResponse(status_code=200 if connected else 503, content=payload)
