"""
Notebox Backend — Health Check Route
======================================

What:  GET /health for container health checks and load balancers.
How:   Runs SELECT 1 through the application's Database and reports
       healthy (200) or unhealthy (503) with version and uptime.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from notebox import __version__
from notebox.database import Database
from notebox.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    database: Database = request.app.state.db
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
