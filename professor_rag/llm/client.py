"""Streaming chat completion client."""

import json
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from professor_rag.config import GeminiSettings, get_settings
from professor_rag.exceptions import (
    ChatProviderError,
    ConfigurationError,
    ErrorCode,
    StreamInterruptedError,
)
from professor_rag.llm.models import Message
from professor_rag.logging_config import get_logger
from professor_rag.observability.metrics import track_chat_request

logger = get_logger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"


class ChatCompletionStream:
    """An established chat completion stream.

    Iterating yields the text delta of each chunk, skipping chunks that
    carry no text. Failures while reading raise StreamInterruptedError.
    """

    def __init__(self, response: httpx.Response, model: str) -> None:
        self._response = response
        self.model = model

    def __aiter__(self) -> AsyncIterator[str]:
        return self.deltas()

    async def deltas(self) -> AsyncIterator[str]:
        """Yield text deltas until the provider signals the end."""
        try:
            async for line in self._response.aiter_lines():
                if not line.startswith(SSE_DATA_PREFIX):
                    continue
                data = line[len(SSE_DATA_PREFIX):].strip()
                if data == SSE_DONE:
                    return
                content = self._extract_delta(json.loads(data))
                if content:
                    yield content
        except StreamInterruptedError:
            raise
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Chat stream interrupted: {e}", extra={"model": self.model})
            raise StreamInterruptedError(
                f"Chat stream interrupted: {e}",
                details={"model": self.model, "error": str(e)},
            ) from e

    def _extract_delta(self, chunk: dict[str, Any]) -> str | None:
        if "error" in chunk:
            raise StreamInterruptedError(
                "Chat provider reported an error mid-stream",
                details={"model": self.model, "error": chunk["error"]},
            )
        choices = chunk.get("choices") or []
        if not choices:
            return None
        delta = choices[0].get("delta") or {}
        return delta.get("content")

    async def aclose(self) -> None:
        """Release the underlying HTTP response."""
        await self._response.aclose()


class ChatClient(ABC):
    """Abstract base class for chat completion clients."""

    @abstractmethod
    async def stream_chat(self, messages: Sequence[Message]) -> ChatCompletionStream:
        """Open a streaming chat completion.

        Args:
            messages: Full outgoing message list.

        Returns:
            An established stream of text deltas.

        Raises:
            ChatProviderError: If the stream cannot be established.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...


class OpenAICompatibleChatClient(ChatClient):
    """Chat client for OpenAI-compatible ``/chat/completions`` APIs.

    Used against Gemini's OpenAI-compatible endpoint by default, but works
    with any server that speaks the same streaming protocol.
    """

    def __init__(
        self,
        settings: GeminiSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the chat client.

        Args:
            settings: Gemini configuration.
            client: HTTP client (shared per request, or for testing).
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
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.chat_model

    def _headers(self) -> dict[str, str]:
        if self._settings.api_key is None:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set",
                details={"setting": "GEMINI_API_KEY"},
            )
        return {
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            "Accept": "text/event-stream",
        }

    async def stream_chat(self, messages: Sequence[Message]) -> ChatCompletionStream:
        """Send the messages with ``stream=True`` and check the status."""
        headers = self._headers()
        client = await self._get_client()
        url = f"{self._settings.base_url}/chat/completions"

        payload = {
            "model": self._settings.chat_model,
            "messages": [msg.to_payload() for msg in messages],
            "stream": True,
        }

        request = client.build_request("POST", url, json=payload, headers=headers)

        start = time.perf_counter()
        try:
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            track_chat_request(self.model_name, time.perf_counter() - start, False)
            logger.error(f"Chat request timed out: {e}")
            raise ChatProviderError(
                "Chat request timed out",
                code=ErrorCode.CHAT_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e
        except httpx.RequestError as e:
            track_chat_request(self.model_name, time.perf_counter() - start, False)
            logger.error(f"Chat connection error: {e}")
            raise ChatProviderError(
                f"Failed to connect to chat service: {e}",
                details={"url": url},
            ) from e

        if response.is_error:
            track_chat_request(self.model_name, time.perf_counter() - start, False)
            status = response.status_code
            await response.aclose()
            logger.error(f"Chat request failed: {status}")

            if status == 429:
                raise ChatProviderError(
                    "Rate limit exceeded",
                    code=ErrorCode.CHAT_RATE_LIMIT,
                    details={"status_code": status},
                )

            raise ChatProviderError(
                f"Chat service returned {status}",
                details={"status_code": status},
            )

        track_chat_request(self.model_name, time.perf_counter() - start)
        return ChatCompletionStream(response, model=self.model_name)
