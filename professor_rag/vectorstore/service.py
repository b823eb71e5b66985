"""Vector store interface with Pinecone and Qdrant implementations."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
from qdrant_client import AsyncQdrantClient

from professor_rag.config import PineconeSettings, QdrantSettings, get_settings
from professor_rag.exceptions import ConfigurationError, ErrorCode, VectorSearchError
from professor_rag.logging_config import get_logger
from professor_rag.observability.metrics import track_vector_search
from professor_rag.vectorstore.models import ProfessorMatch

logger = get_logger(__name__)


class VectorStore(ABC):
    """Abstract base class for the professor index.

    The index is read-only from this service's point of view.
    """

    provider: str = "unknown"

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int = 3,
    ) -> list[ProfessorMatch]:
        """Find the nearest professors to a query vector.

        Args:
            vector: Query embedding.
            top_k: Maximum matches to return.

        Returns:
            Matches in provider order, metadata included.

        Raises:
            VectorSearchError: If the search fails.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release client resources."""
        ...


class PineconeVectorStore(VectorStore):
    """Pinecone index queried through its data-plane REST API."""

    provider = "pinecone"

    def __init__(
        self,
        settings: PineconeSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Pinecone store.

        Args:
            settings: Pinecone configuration.
            client: HTTP client (shared per request, or for testing).
        """
        self._settings = settings or get_settings().pinecone
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _query_url(self) -> str:
        host = self._settings.index_host
        if not host:
            raise ConfigurationError(
                "PINECONE_INDEX_HOST is not set",
                details={"setting": "PINECONE_INDEX_HOST"},
            )
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return f"{host.rstrip('/')}/query"

    def _headers(self) -> dict[str, str]:
        if self._settings.api_key is None:
            raise ConfigurationError(
                "PINECONE_API_KEY is not set",
                details={"setting": "PINECONE_API_KEY"},
            )
        return {
            "Api-Key": self._settings.api_key.get_secret_value(),
            "X-Pinecone-API-Version": self._settings.api_version,
        }

    async def query(
        self,
        vector: list[float],
        top_k: int = 3,
    ) -> list[ProfessorMatch]:
        """Query the configured namespace with metadata included."""
        url = self._query_url()
        headers = self._headers()
        client = await self._get_client()

        payload: dict[str, Any] = {
            "vector": vector,
            "topK": top_k,
            "includeMetadata": True,
            "namespace": self._settings.namespace,
        }

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
            matches = [
                ProfessorMatch(
                    id=str(match["id"]),
                    score=match.get("score") or 0.0,
                    metadata=match.get("metadata") or {},
                )
                for match in data.get("matches", [])
            ]
        except httpx.HTTPStatusError as e:
            track_vector_search(self.provider, time.perf_counter() - start, False)
            status = e.response.status_code
            logger.error(
                f"Vector search failed: {status}",
                extra={"url": url, "status": status},
            )
            raise VectorSearchError(
                f"Pinecone returned {status}",
                code=ErrorCode.INDEX_NOT_FOUND if status == 404 else ErrorCode.VECTOR_SEARCH_ERROR,
                details={"status_code": status, "namespace": self._settings.namespace},
            ) from e
        except httpx.RequestError as e:
            track_vector_search(self.provider, time.perf_counter() - start, False)
            logger.error(f"Vector search connection error: {e}", extra={"url": url})
            raise VectorSearchError(
                f"Failed to connect to Pinecone: {e}",
                details={"url": url},
            ) from e
        except (KeyError, TypeError, ValueError) as e:
            track_vector_search(self.provider, time.perf_counter() - start, False)
            raise VectorSearchError(
                f"Invalid response from Pinecone: {e}",
                details={"error": str(e)},
            ) from e

        track_vector_search(self.provider, time.perf_counter() - start)
        return matches


class QdrantVectorStore(VectorStore):
    """Qdrant collection of professor vectors.

    Qdrant point ids must be integers or UUIDs, so the professor name is
    read from the ``professor`` payload field when present.
    """

    provider = "qdrant"
    ID_FIELD = "professor"

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(
                url=self._settings.url,
                api_key=api_key,
            )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def query(
        self,
        vector: list[float],
        top_k: int = 3,
    ) -> list[ProfessorMatch]:
        """Search the professor collection with payloads included."""
        client = await self._get_client()
        collection = self._settings.collection_name

        start = time.perf_counter()
        try:
            results = await client.query_points(
                collection_name=collection,
                query=vector,
                limit=top_k,
                with_payload=True,
            )

            matches: list[ProfessorMatch] = []
            for point in results.points:
                payload = dict(point.payload) if point.payload else {}
                professor_id = payload.pop(self.ID_FIELD, None) or point.id
                matches.append(
                    ProfessorMatch(
                        id=str(professor_id),
                        score=point.score if point.score is not None else 0.0,
                        metadata=payload,
                    )
                )

        except Exception as e:
            track_vector_search(self.provider, time.perf_counter() - start, False)
            logger.error(f"Vector search failed: {e}", extra={"collection": collection})
            raise VectorSearchError(
                f"Failed to search: {e}",
                details={"collection": collection, "error": str(e)},
            ) from e

        track_vector_search(self.provider, time.perf_counter() - start)
        return matches
