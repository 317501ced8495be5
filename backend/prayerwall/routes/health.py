"""
Prayer Wall Backend — Health Check & Smoke Test Routes
========================================================

What:  GET /health for probes, GET /api/test for checking API routing.
How:   /health runs SELECT 1 against the store; /api/test touches nothing.

Status levels:
    - healthy:   store reachable
    - unhealthy: store unreachable or DATABASE_URL not configured
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from prayerwall import __version__
from prayerwall.database import get_engine
from prayerwall.schemas.prayer import ApiTestResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """
    Check the health of the service and its store.

    Always answers 200; the body says whether the store is reachable.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get(
    "/api/test",
    response_model=ApiTestResponse,
    summary="API routing smoke test",
)
async def api_test() -> ApiTestResponse:
    return ApiTestResponse(
        status="API routes are working",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
