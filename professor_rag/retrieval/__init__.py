"""Retrieval pipeline module."""

from professor_rag.retrieval.retriever import DEFAULT_TOP_K, ProfessorRetriever, Retriever

__all__ = [
    "DEFAULT_TOP_K",
    "ProfessorRetriever",
    "Retriever",
]
