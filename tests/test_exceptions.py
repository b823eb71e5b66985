"""Tests for application exceptions."""

from professor_rag.exceptions import (
    ChatProviderError,
    ConfigurationError,
    EmbeddingProviderError,
    ErrorCode,
    MalformedRequestError,
    ProfessorRAGError,
    StreamInterruptedError,
    VectorSearchError,
)


class TestErrorCode:
    """Tests for error codes."""

    def test_error_code_format(self) -> None:
        """Error codes follow RAG-XXXX format."""
        for code in ErrorCode:
            assert code.value.startswith("RAG-")
            assert len(code.value) == 8

    def test_error_code_uniqueness(self) -> None:
        """All error codes are unique."""
        codes = [code.value for code in ErrorCode]
        assert len(codes) == len(set(codes))


class TestProfessorRAGError:
    """Tests for base exception."""

    def test_basic_exception(self) -> None:
        """Base exception stores message and code."""
        error = ProfessorRAGError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert str(error) == "Something went wrong"

    def test_to_dict(self) -> None:
        """Exception converts to API response dict."""
        error = ProfessorRAGError(
            "Something went wrong",
            details={"trace_id": "abc123"},
        )

        assert error.to_dict() == {
            "error": {
                "code": "RAG-1000",
                "message": "Something went wrong",
                "details": {"trace_id": "abc123"},
            }
        }


class TestSubclasses:
    """Tests for the error taxonomy."""

    def test_configuration_error(self) -> None:
        """ConfigurationError has its own code."""
        error = ConfigurationError("GEMINI_API_KEY is not set")
        assert error.code == ErrorCode.CONFIGURATION_ERROR
        assert isinstance(error, ProfessorRAGError)

    def test_malformed_request(self) -> None:
        """MalformedRequestError has its own code."""
        error = MalformedRequestError("Request body is empty")
        assert error.code == ErrorCode.MALFORMED_REQUEST

    def test_embedding_provider_error(self) -> None:
        """EmbeddingProviderError defaults to a service error."""
        error = EmbeddingProviderError("Service unavailable")
        assert error.code == ErrorCode.EMBEDDING_SERVICE_ERROR

    def test_embedding_timeout_code(self) -> None:
        """EmbeddingProviderError can indicate a timeout."""
        error = EmbeddingProviderError("Timed out", code=ErrorCode.EMBEDDING_TIMEOUT)
        assert error.code == ErrorCode.EMBEDDING_TIMEOUT

    def test_vector_search_error(self) -> None:
        """VectorSearchError defaults to a search error."""
        error = VectorSearchError("Connection failed")
        assert error.code == ErrorCode.VECTOR_SEARCH_ERROR

    def test_chat_provider_error(self) -> None:
        """ChatProviderError can indicate rate limiting."""
        error = ChatProviderError("Too many requests", code=ErrorCode.CHAT_RATE_LIMIT)
        assert error.code == ErrorCode.CHAT_RATE_LIMIT

    def test_stream_interrupted(self) -> None:
        """StreamInterruptedError has its own code."""
        error = StreamInterruptedError("Connection reset")
        assert error.code == ErrorCode.STREAM_INTERRUPTED
        assert isinstance(error, ProfessorRAGError)
