"""
Health API Routes
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.config.settings import settings
from document_service.infrastructure.database.client import get_db
from document_service.infrastructure.storage import StorageProvider, get_storage_provider
from document_service.models import HealthResponse

router = APIRouter(prefix="/api/v1", tags=["health"])
logger = logging.getLogger(__name__)

SERVICE_VERSION = "0.1.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Detailed Health Check",
    description="""
Health check including database and storage backend connectivity.

**Workflow**:
1. Executes a test query against the database
2. Checks the configured storage backend (local, S3 or Azure)
3. Reports `healthy` when both succeed, `degraded` otherwise

**Response Example**:
```json
{
  "status": "healthy",
  "service": "ouderschap-document-service",
  "version": "0.1.0",
  "checks": {"database": "ok", "storage": "ok"}
}
```

**Performance**: Executes actual I/O operations (slower than /health endpoint)

**Authorization**: None required (public endpoint for monitoring)
    """,
    responses={200: {"description": "Health check completed (status may be healthy or degraded)"}},
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    storage: StorageProvider = Depends(get_storage_provider),
) -> HealthResponse:
    """Health check endpoint"""
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_ok = False

    storage_ok = await storage.health_check()

    return HealthResponse(
        status="healthy" if (db_ok and storage_ok) else "degraded",
        service=settings.service_name,
        version=SERVICE_VERSION,
        checks={
            "database": "ok" if db_ok else "unavailable",
            "storage": "ok" if storage_ok else "unavailable",
        },
    )
