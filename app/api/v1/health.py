"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.api.v1.deps import DBSession
from app.config import settings
from app.core.timeutils import utcnow

router = APIRouter()


@router.get(
    "/health",
    summary="Health check",
    description="""
System health check for monitoring and load balancers.

**Checks:**
- API is running
- Database connectivity

**Response Example:**
```json
{
  "status": "healthy",
  "version": "0.4.0",
  "environment": "production",
  "timestamp": "2026-10-19T12:00:00Z",
  "checks": {
    "database": "healthy"
  }
}
```

**Status Values:**
- `healthy` - All systems operational
- `unhealthy` - The database is unreachable (HTTP 503)

**No authentication required.**
    """,
    responses={
        200: {"description": "System is healthy"},
        503: {"description": "System is unhealthy (database unreachable)"},
    },
)
async def health_check(db: DBSession) -> Any:
    """Health check endpoint for monitoring and load balancer checks."""
    health_status: dict[str, Any] = {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": utcnow().isoformat(),
        "checks": {},
    }

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        health_status["checks"]["database"] = "healthy"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"unhealthy: {str(e)}"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
