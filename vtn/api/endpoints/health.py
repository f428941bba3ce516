"""
Health Check Endpoints
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import structlog

from vtn import __version__
from vtn.core.database import check_database_health
from vtn.core.deps import get_data_source
from vtn.data_source.base import DataSource

logger = structlog.get_logger()
router = APIRouter()


@router.get("")
async def health_check(data_source: DataSource = Depends(get_data_source)) -> Any:
    """
    Health check endpoint for load balancers

    Returns:
        Overall status plus the state of the storage backend, 503 when the
        database cannot be reached
    """
    engine = getattr(data_source, "engine", None)
    if engine is None:
        return {"status": "healthy", "version": __version__, "storage": "memory"}

    if await check_database_health(engine):
        return {"status": "healthy", "version": __version__, "storage": "sql"}

    logger.warning("Health check reports unreachable database")
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "version": __version__, "storage": "sql"},
    )
