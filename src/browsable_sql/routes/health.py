import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from browsable_sql.models.health import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthStatus, response_model_exclude_none=True)
async def health_check():
    return HealthStatus(status="ok")


@router.get("/ready", response_model=HealthStatus, response_model_exclude_none=True)
async def readiness_check(request: Request):
    """Runs ``SELECT 1`` through the configured executor."""
    executor = request.app.state.executor
    try:
        executor("SELECT 1")
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            HealthStatus(status="unavailable", detail=f"Storage unavailable: {e}").model_dump(),
            status_code=503,
        )
    return HealthStatus(status="ready")
