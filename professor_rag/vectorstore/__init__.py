"""Vector store module."""

from professor_rag.vectorstore.models import ProfessorMatch, ProfessorMetadata
from professor_rag.vectorstore.service import (
    PineconeVectorStore,
    QdrantVectorStore,
    VectorStore,
)

__all__ = [
    "PineconeVectorStore",
    "ProfessorMatch",
    "ProfessorMetadata",
    "QdrantVectorStore",
    "VectorStore",
]
