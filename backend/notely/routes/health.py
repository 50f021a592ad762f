"""
Notely Backend — Health Check Route
====================================

What:  Readiness endpoint for load balancers and container health checks.
How:   Returns a fixed payload without touching the database, so it answers
       200 in both full and degraded mode.
Who:   Mounted at /v1/healthz by build_v1_router() and at /healthz by
       create_app().
"""

from fastapi import APIRouter

from notely.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/healthz",
    response_model=HealthResponse,
    summary="Service readiness check",
)
async def readiness() -> HealthResponse:
    return HealthResponse(status="ok")
