import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.database import QueryExecutor, get_executor
from app.services.schema_bootstrap import SchemaBootstrapper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["database"])


def get_bootstrapper(executor: QueryExecutor = Depends(get_executor)) -> SchemaBootstrapper:
    return SchemaBootstrapper(executor)


@router.post("/db-init")
async def initialize_database(bootstrapper: SchemaBootstrapper = Depends(get_bootstrapper)):
    try:
        success = await bootstrapper.setup()
    except Exception as exc:
        logger.exception("Database initialization error")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Database initialization error",
                "error": str(exc),
            },
        )

    if not success:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Database initialization failed"},
        )

    return {"success": True, "message": "Database initialized successfully"}
