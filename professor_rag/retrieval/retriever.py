"""Retriever interface and implementations."""

from abc import ABC, abstractmethod

from professor_rag.embeddings.service import EmbeddingService
from professor_rag.logging_config import get_logger
from professor_rag.observability.metrics import track_retrieval_request
from professor_rag.vectorstore.models import ProfessorMatch
from professor_rag.vectorstore.service import VectorStore

logger = get_logger(__name__)

DEFAULT_TOP_K = 3


class Retriever(ABC):
    """Abstract base class for retrievers."""

    @abstractmethod
    async def retrieve(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
    ) -> list[ProfessorMatch]:
        """Retrieve the professors closest to a query.

        Args:
            query: The student's message text.
            top_k: Maximum number of matches.

        Returns:
            Matches in the order the vector store returned them.
        """
        ...


class ProfessorRetriever(Retriever):
    """Embeds the query, then searches the professor index.

    Provider errors propagate unchanged so callers can tell an embedding
    failure from a search failure. A failed embedding never reaches the
    vector store.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store

    async def retrieve(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
    ) -> list[ProfessorMatch]:
        """Retrieve professors using semantic similarity.

        Raises:
            EmbeddingProviderError: If the query cannot be embedded.
            VectorSearchError: If the index query fails.
        """
        embedding_result = await self._embedding_service.embed(query)

        matches = await self._vector_store.query(
            vector=embedding_result.embedding,
            top_k=top_k,
        )

        track_retrieval_request(
            matches_returned=len(matches),
            top_score=max((m.score for m in matches), default=0.0),
        )
        logger.debug(
            f"Retrieved {len(matches)} professors for query",
            extra={"query_length": len(query), "top_k": top_k},
        )

        return matches
