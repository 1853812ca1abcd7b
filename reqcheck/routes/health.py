"""
ReqCheck — Health Check Route
=============================

What:  Health check endpoint for monitoring and local smoke tests.
How:   Probes the database with SELECT 1 and reports router state.
Who:   Called by Docker health checks, load balancers, and developers.

Status levels:
    healthy:   Database reachable (HTTP 200)
    unhealthy: Database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from reqcheck import __version__
from reqcheck.database import engine
from reqcheck.schemas.movie import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check the database and report how much the router has seen.

    Not dispatched through the ReqCheck router, so probes do not add
    diagnostic records.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall == "unhealthy":
        response.status_code = 503

    dispatcher = request.app.state.router
    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        routes=len(dispatcher.routes),
        diagnostics_recorded=len(dispatcher.reporter),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
