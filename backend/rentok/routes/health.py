"""
RentOK Admin Backend — Health Check Route
==========================================

What:  Liveness plus a database probe for load balancers and Docker.
How:   SELECT 1 against the pool. /health is excluded from the Access Gate,
       so probes need no session cookie.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

External services (ImageKit, Resend) are not probed: they are only needed by
a few endpoints, and their configuration is reported in `checks`.
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from rentok import __version__
from rentok.config import settings
from rentok.database import engine
from rentok.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
        checks={
            "imagekit": "configured" if settings.imagekit_configured else "missing",
            "email": "configured" if settings.resend_api_key else "missing",
        },
    )
