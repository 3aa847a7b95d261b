"""Health & Readiness Probes.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process is up
    - GET /api/v1/health/ready answers 503 until the database answers AND the
      lifespan has built app.state.repositories
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from bloxmarket.infrastructure import database

SERVICE = "bloxmarket-domain"
VERSION = "1.0.0"

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE, "version": VERSION}


@router.get("/ready")
async def readiness(request: Request):
    checks = await _probe(request)
    if not all(checks.values()):
        failed = sorted(name for name, ok in checks.items() if not ok)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "failed": failed},
        )
    return {"status": "ready", "checks": {name: "healthy" for name in checks}}


async def _probe(request: Request) -> dict[str, bool]:
    manager = database.db_manager
    return {
        "database": bool(manager) and await manager.health_check(),
        "repositories": getattr(request.app.state, "repositories", None) is not None,
    }
