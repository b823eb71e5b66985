"""Error taxonomy for the professor chat service.

Every error raised by the service derives from ProfessorRAGError and
carries an ErrorCode. The API layer turns the code into an HTTP status;
the CLI prints it.
"""

from enum import Enum
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Stable codes returned in error bodies."""

    # Request and environment (1xxx)
    INTERNAL_ERROR = "RAG-1000"
    CONFIGURATION_ERROR = "RAG-1001"
    MALFORMED_REQUEST = "RAG-1002"

    # Embedding provider (3xxx)
    EMBEDDING_SERVICE_ERROR = "RAG-3000"
    EMBEDDING_TIMEOUT = "RAG-3001"

    # Professor index (4xxx)
    VECTOR_SEARCH_ERROR = "RAG-4000"
    INDEX_NOT_FOUND = "RAG-4001"

    # Chat provider (5xxx)
    CHAT_SERVICE_ERROR = "RAG-5000"
    CHAT_TIMEOUT = "RAG-5001"
    CHAT_RATE_LIMIT = "RAG-5002"
    STREAM_INTERRUPTED = "RAG-5003"


class ProfessorRAGError(Exception):
    """Base error for the service.

    Subclasses pick their code through ``default_code``; provider errors
    may override it per instance (timeouts, rate limits).

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Extra context, safe to return to clients.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Render the error body returned by the API."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(ProfessorRAGError):
    """A credential or endpoint needed for the request is not set."""

    default_code = ErrorCode.CONFIGURATION_ERROR


class MalformedRequestError(ProfessorRAGError):
    """Request body is not a non-empty conversation."""

    default_code = ErrorCode.MALFORMED_REQUEST


class EmbeddingProviderError(ProfessorRAGError):
    """The query could not be embedded."""

    default_code = ErrorCode.EMBEDDING_SERVICE_ERROR


class VectorSearchError(ProfessorRAGError):
    """The professor index could not be searched."""

    default_code = ErrorCode.VECTOR_SEARCH_ERROR


class ChatProviderError(ProfessorRAGError):
    """The chat completion stream could not be established."""

    default_code = ErrorCode.CHAT_SERVICE_ERROR


class StreamInterruptedError(ProfessorRAGError):
    """The chat completion stream failed after the reply started."""

    default_code = ErrorCode.STREAM_INTERRUPTED
