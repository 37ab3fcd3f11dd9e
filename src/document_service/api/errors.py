"""
Error Handlers

Maps domain exceptions to uniform HTTP responses. Authentication and
authorization failures never reveal their internal reason; infrastructure
failures never leak detail to the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from document_service.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DocumentValidationError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        logger.info(f"Unauthorized {request.method} {request.url.path}: {exc.reason}")
        return JSONResponse(status_code=401, content={"detail": "Unauthorized"})

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError):
        return JSONResponse(status_code=403, content={"detail": "Forbidden"})

    @app.exception_handler(NotFoundError)
    async def not_found_error_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConflictError)
    async def conflict_error_handler(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(DocumentValidationError)
    async def validation_error_handler(request: Request, exc: DocumentValidationError):
        logger.warning(f"Validation failed on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
