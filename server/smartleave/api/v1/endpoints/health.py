from fastapi import APIRouter, Depends, status as http_status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from typing import Dict, Any
from datetime import datetime, timezone
import logging
import time

from smartleave.core.config import settings
from smartleave.core.database import get_db, engine

router = APIRouter()
logger = logging.getLogger(__name__)

SERVICE_NAME = "SmartLeave API"
SERVICE_VERSION = "1.0.0"

# Track server startup time for uptime calculation
SERVER_START_TIME = time.time()


async def get_database_info(db: AsyncSession) -> Dict[str, Any]:
    """Database connectivity and connection pool statistics."""
    db_info: Dict[str, Any] = {"status": "unknown", "dialect": engine.dialect.name, "connection_pool": {}}

    try:
        await db.execute(text("SELECT 1"))
        db_info["status"] = "connected"

        pool = engine.pool
        # Only queue pools report sizing; static and null pools do not
        db_info["connection_pool"] = {
            name: getattr(pool, name)() if callable(getattr(pool, name, None)) else None
            for name in ("size", "checkedout", "overflow")
        }
    except Exception as e:
        db_info["status"] = "disconnected"
        db_info["error"] = str(e)
        logger.error(f"Database connection error in health check: {str(e)}", exc_info=True)

    return db_info


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check with database connectivity.

    Returns:
        - 200 OK: Service is healthy
        - 503 Service Unavailable: database disconnected
    """
    uptime_seconds = time.time() - SERVER_START_TIME
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "uptime_seconds": round(uptime_seconds, 2),
        },
        "configuration": {
            "environment": settings.ENVIRONMENT,
            "db_command_timeout_seconds": settings.DB_COMMAND_TIMEOUT_SECONDS,
        },
    }

    http_code = http_status.HTTP_200_OK
    db_info = await get_database_info(db)
    health_status["database"] = db_info
    if db_info.get("status") != "connected":
        health_status["status"] = "unhealthy"
        health_status["error"] = db_info.get("error", "Database connection failed")
        http_code = http_status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=http_code, content=health_status)


@router.get("/health/live")
async def liveness_check():
    """Process is up; does not touch the database."""
    return JSONResponse(
        status_code=http_status.HTTP_200_OK,
        content={"status": "alive", "service": SERVICE_NAME},
    )
