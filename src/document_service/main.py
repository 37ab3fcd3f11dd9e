"""
Ouderschap Document Service - Main Application

FastAPI application for the parenting-plan document portal: dossier
documents, guest access and the document audit trail.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from document_service.config.settings import settings
from document_service.api.errors import register_error_handlers
from document_service.api.routes.audit import router as audit_router
from document_service.api.routes.documents import router as documents_router
from document_service.api.routes.guests import guest_router
from document_service.api.routes.guests import router as guests_router
from document_service.api.routes.health import SERVICE_VERSION
from document_service.api.routes.health import router as health_router
from document_service.api.routes.lookup import router as lookup_router
from document_service.api.routes.storage import router as storage_router
from document_service.core.cache import TTLCache
from document_service.infrastructure.database.client import db_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.service_name} ({settings.environment})")
    logger.info(f"Database: {settings.database_url}")
    if settings.skip_auth:
        logger.warning("SKIP_AUTH is enabled: every request without a guest token acts as the dev user")

    # Initialize database
    await db_client.initialize()

    yield

    # Shutdown
    logger.info("Shutting down Document Service")
    await db_client.close()


# Create FastAPI app
app = FastAPI(
    title="Ouderschap Document Service",
    description="Document portal for parenting-plan dossiers with guest access and audit logging",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

# Process-wide category cache, shared by all requests
app.state.category_cache = TTLCache(settings.category_cache_ttl_seconds)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(documents_router)
app.include_router(guests_router)
app.include_router(guest_router)
app.include_router(audit_router)
app.include_router(lookup_router)
app.include_router(storage_router)
app.include_router(health_router)


# Root endpoint
@app.get(
    "/",
    summary="Service Information",
    description="""
Returns basic information about the Document Service.

**Response Example**:
```json
{
  "service": "ouderschap-document-service",
  "version": "0.1.0",
  "status": "running",
  "environment": "production"
}
```

**Authorization**: None required (public endpoint)
    """,
    responses={
        200: {"description": "Service information returned successfully"}
    }
)
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": SERVICE_VERSION,
        "status": "running",
        "environment": settings.environment
    }


# Health endpoint (simple version at root level)
@app.get(
    "/health",
    summary="Health Check",
    description="""
Returns the liveness status of the Document Service.

**Use Cases**:
- Kubernetes liveness/readiness probes
- Load balancer health checks
- Docker Compose healthcheck

**Storage**: No database or storage query (lightweight check)
**Authorization**: None required (public endpoint)

**Note**: For database and storage status, use the `/api/v1/health` endpoint.
    """,
    responses={
        200: {"description": "Service is healthy and operational"}
    }
)
async def health():
    """Simple health check"""
    return {"status": "healthy", "service": settings.service_name}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "document_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=True if settings.environment == "development" else False
    )
