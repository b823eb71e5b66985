"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod

import httpx

from professor_rag.config import GeminiSettings, get_settings
from professor_rag.embeddings.models import EmbeddingResult
from professor_rag.exceptions import (
    ConfigurationError,
    EmbeddingProviderError,
    ErrorCode,
)
from professor_rag.logging_config import get_logger
from professor_rag.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for turning query text into a vector.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.

        Raises:
            EmbeddingProviderError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...


class GeminiEmbeddingService(EmbeddingService):
    """Embedding service backed by Gemini's OpenAI-compatible API.

    Posts ``{"input", "model", "encoding_format": "float"}`` to
    ``{base_url}/embeddings``.
    """

    ENCODING_FORMAT = "float"

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            settings: Gemini configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().gemini
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

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.embedding_model

    def _headers(self) -> dict[str, str]:
        if self._settings.api_key is None:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set",
                details={"setting": "GEMINI_API_KEY"},
            )
        return {"Authorization": f"Bearer {self._settings.api_key.get_secret_value()}"}

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for the query text.

        Args:
            text: Text to embed, forwarded as-is.

        Returns:
            EmbeddingResult with vector.

        Raises:
            ConfigurationError: If the API key is missing.
            EmbeddingProviderError: If the request fails or the response
                carries no vector.
        """
        headers = self._headers()
        client = await self._get_client()
        url = f"{self._settings.base_url}/embeddings"

        payload = {
            "input": text,
            "model": self._settings.embedding_model,
            "encoding_format": self.ENCODING_FORMAT,
        }

        start = time.perf_counter()
        try:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, False)
            logger.error(f"Embedding request timed out: {e}", extra={"url": url})
            raise EmbeddingProviderError(
                "Embedding request timed out",
                code=ErrorCode.EMBEDDING_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e
        except httpx.HTTPStatusError as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, False)
            logger.error(
                f"Embedding request failed: {e.response.status_code}",
                extra={"url": url, "status": e.response.status_code},
            )
            raise EmbeddingProviderError(
                f"Embedding service returned {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, False)
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingProviderError(
                f"Failed to connect to embedding service: {e}",
                details={"url": url},
            ) from e

        try:
            data = response.json()
            embedding = data["data"][0]["embedding"]
            result = EmbeddingResult(
                text=text,
                embedding=embedding,
                model=self.model_name,
                dimensions=len(embedding),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            track_embedding_request(self.model_name, time.perf_counter() - start, False)
            raise EmbeddingProviderError(
                f"Invalid response from embedding service: {e}",
                details={"error": str(e)},
            ) from e

        track_embedding_request(self.model_name, time.perf_counter() - start)
        return result
