"""
Health check router for the Task Service.
"""
import logging
import time

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from task_service.config import settings
from task_service.db import get_db
from task_service.schemas.common_schemas import HealthResponse

logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """
    Health check endpoint to verify the service is running.

    The API itself is reported as ok whenever this handler runs; a failing
    database marks the overall status as degraded without failing the request.
    """
    response = HealthResponse(
        status="ok",
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT.value,
        components={"api": {"status": "ok"}},
    )

    try:
        start_time = time.time()
        await db.execute(text("SELECT 1"))
        response.components["database"] = {
            "status": "ok",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Health check - Database error: {e.__class__.__name__}: {e}",
            exc_info=True,
        )
        response.components["database"] = {
            "status": "error",
            "message": "Database connection failed",
        }
        response.status = "degraded"

    return response
