"""Health Routes — liveness and readiness probes.

Invariants:
    - GET /health/ answers 200 while the process runs, without touching the database
    - GET /health/ready answers 503 until the plan store accepts queries
"""

from fastapi import APIRouter, Response, status

from empirion.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "empirion-plans-api"


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness(response: Response):
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready", "checks": {"database": "healthy"}}
