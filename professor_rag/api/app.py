"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics,
health checks and the chat route.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from professor_rag import __version__
from professor_rag.api.routes import router
from professor_rag.config import VectorProvider, get_settings
from professor_rag.exceptions import ErrorCode, ProfessorRAGError
from professor_rag.logging_config import get_logger, setup_logging
from professor_rag.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)

# Error codes that are not plain 500s
_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.MALFORMED_REQUEST: 400,
    ErrorCode.CHAT_RATE_LIMIT: 429,
    ErrorCode.EMBEDDING_SERVICE_ERROR: 502,
    ErrorCode.VECTOR_SEARCH_ERROR: 502,
    ErrorCode.INDEX_NOT_FOUND: 502,
    ErrorCode.CHAT_SERVICE_ERROR: 502,
    ErrorCode.EMBEDDING_TIMEOUT: 504,
    ErrorCode.CHAT_TIMEOUT: 504,
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting professor chat service",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
            "vector_provider": settings.vector_provider.value,
        },
    )

    missing = settings.missing_credentials()
    if missing:
        logger.warning(
            "Chat requests will fail until credentials are set",
            extra={"missing": missing},
        )

    yield

    logger.info("Shutting down professor chat service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Professor RAG Chat",
        description="Streams professor recommendations grounded in a vector index",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(ProfessorRAGError, professor_rag_exception_handler)

    app.include_router(router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Observability"])

    return app


async def professor_rag_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert ProfessorRAGError into a structured JSON response."""
    if not isinstance(exc, ProfessorRAGError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=get_status_code(exc.code),
        content=exc.to_dict(),
    )


def get_status_code(code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    return _STATUS_CODES.get(code, 500)


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check() -> dict[str, Any]:
    """Readiness probe.

    Reports whether every credential the chat route needs is configured.
    """
    settings = get_settings()
    missing = set(settings.missing_credentials())

    required = ["GEMINI_API_KEY"]
    if settings.vector_provider == VectorProvider.PINECONE:
        required += ["PINECONE_API_KEY", "PINECONE_INDEX_HOST"]

    checks: dict[str, str] = {"config": "ok"}
    for name in required:
        checks[name.lower()] = "missing" if name in missing else "ok"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "vector_provider": settings.vector_provider.value,
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


app = create_app()
