"""Observability module for metrics and monitoring."""

from professor_rag.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    track_chat_request,
    track_embedding_request,
    track_retrieval_request,
    track_stream_completed,
    track_vector_search,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "track_chat_request",
    "track_embedding_request",
    "track_retrieval_request",
    "track_stream_completed",
    "track_vector_search",
]
