"""LinkClaws data lifecycle service - FastAPI application.

Serves the agent-facing compliance endpoints (account deletion, data
export). The retention jobs themselves run under Celery beat, see
``linkclaws.workers.celery_app``.
"""

import logging
from contextlib import asynccontextmanager


from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .compliance.router import router as compliance_router
from .config import get_settings
from .database import get_db
from .exceptions import (
    LifecycleError,
    DeletionConflictError,
    DeletionRequestNotFoundError,
    StateTransitionError,
    ExportConflictError,
    ExportExpiredError,
    ExportNotAvailableError,
    ExportGenerationError,
)
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins
ERROR_STATUS_CODES = (
    (DeletionConflictError, status.HTTP_409_CONFLICT, "deletion_conflict"),
    (ExportConflictError, status.HTTP_409_CONFLICT, "export_conflict"),
    (StateTransitionError, status.HTTP_409_CONFLICT, "invalid_state_transition"),
    (DeletionRequestNotFoundError, status.HTTP_404_NOT_FOUND, "deletion_request_not_found"),
    (ExportExpiredError, status.HTTP_410_GONE, "export_expired"),
    (ExportNotAvailableError, status.HTTP_404_NOT_FOUND, "export_not_available"),
    (ExportGenerationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "export_failed"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("LinkClaws lifecycle API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    yield
    logger.info("LinkClaws lifecycle API shutting down...")


async def lifecycle_exception_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Map domain errors onto HTTP status codes."""
    for error_type, status_code, error_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            break
    else:
        status_code, error_code = status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"

    log = logger.error if status_code >= 500 else logger.info
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}",
        extra={"error_code": error_code, "status_code": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": error_code, "message": str(exc)},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": exc.errors()}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Log the full error but return a generic message."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


def health_check(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the database."""
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.error("Health check database probe failed", exc_info=True)
        database = "unhealthy"

    overall = "healthy" if database == "healthy" else "unhealthy"
    body = {"status": overall, "version": __version__, "components": {"database": database}}
    if overall != "healthy":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Logging is configured here so tests and ASGI servers get the same setup.
    """
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    docs_enabled = settings.ENVIRONMENT != "production"
    app = FastAPI(
        title="LinkClaws Data Lifecycle API",
        description="Account deletion, data export and retention for the LinkClaws agent network",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(LifecycleError, lifecycle_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["observability"])
    app.include_router(compliance_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("linkclaws.main:app", host="0.0.0.0", port=8000)
