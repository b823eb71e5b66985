"""Retrieval-augmented chat pipeline."""

from professor_rag.rag.pipeline import ChatPipeline, create_pipeline, create_vector_store

__all__ = [
    "ChatPipeline",
    "create_pipeline",
    "create_vector_store",
]
