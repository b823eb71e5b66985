"""Prometheus metrics for the professor chat service.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Embedding request latency
- Vector search latency and match counts
- Chat stream establishment and streamed chunks
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from professor_rag.logging_config import get_logger

logger = get_logger(__name__)

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

# Vector Search Metrics
VECTOR_SEARCH_DURATION = Histogram(
    "vector_search_duration_seconds",
    "Vector search duration in seconds",
    ["provider", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

RETRIEVAL_MATCHES_RETURNED = Histogram(
    "retrieval_matches_returned",
    "Number of professor matches returned per query",
    buckets=[0, 1, 2, 3],
)

RETRIEVAL_TOP_SCORE = Histogram(
    "retrieval_top_score",
    "Top similarity score per query",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Chat Metrics
CHAT_REQUEST_DURATION = Histogram(
    "chat_request_duration_seconds",
    "Time to establish a chat completion stream",
    ["model", "status"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

CHAT_REQUEST_TOTAL = Counter(
    "chat_requests_total",
    "Total chat completion requests",
    ["model", "status"],
)

CHAT_STREAM_CHUNKS = Counter(
    "chat_stream_chunks_total",
    "Text deltas relayed to clients",
    ["model"],
)

CHAT_STREAM_TOTAL = Counter(
    "chat_streams_total",
    "Finished chat streams by outcome",
    ["model", "status"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        # For streamed chat responses this is time to first byte.
        duration = time.perf_counter() - start_time

        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/chat"):
            return "/api/chat"
        return path


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_embedding_request(
    model: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()


def track_vector_search(
    provider: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track vector search latency.

    Args:
        provider: Vector database name.
        duration: Search duration in seconds.
        success: Whether the search succeeded.
    """
    status = "success" if success else "error"
    VECTOR_SEARCH_DURATION.labels(provider=provider, status=status).observe(duration)


def track_retrieval_request(
    matches_returned: int,
    top_score: float,
) -> None:
    """Track retrieval result metrics.

    Args:
        matches_returned: Number of matches returned.
        top_score: Highest similarity score.
    """
    RETRIEVAL_MATCHES_RETURNED.observe(matches_returned)
    if top_score > 0:
        RETRIEVAL_TOP_SCORE.observe(top_score)


def track_chat_request(
    model: str,
    duration: float,
    success: bool = True,
) -> None:
    """Track chat stream establishment.

    Args:
        model: Chat model name.
        duration: Seconds until the provider accepted the request.
        success: Whether the stream was established.
    """
    status = "success" if success else "error"

    CHAT_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    CHAT_REQUEST_TOTAL.labels(model=model, status=status).inc()


def track_stream_completed(
    model: str,
    chunks: int,
    success: bool = True,
) -> None:
    """Track a finished chat stream.

    Args:
        model: Chat model name.
        chunks: Number of text deltas relayed.
        success: False when the stream was interrupted.
    """
    status = "success" if success else "interrupted"

    CHAT_STREAM_CHUNKS.labels(model=model).inc(chunks)
    CHAT_STREAM_TOTAL.labels(model=model, status=status).inc()
