"""Embedding service module."""

from professor_rag.embeddings.models import EmbeddingResult
from professor_rag.embeddings.service import EmbeddingService, GeminiEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "GeminiEmbeddingService",
]
