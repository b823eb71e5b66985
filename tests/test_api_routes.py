"""Tests for the chat API route."""

import json
from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from professor_rag.api.app import app, get_status_code
from professor_rag.api.routes import STREAM_MEDIA_TYPE, get_pipeline, parse_conversation
from professor_rag.embeddings.models import EmbeddingResult
from professor_rag.exceptions import (
    ChatProviderError,
    ConfigurationError,
    EmbeddingProviderError,
    ErrorCode,
    MalformedRequestError,
    VectorSearchError,
)
from professor_rag.llm.models import Role
from professor_rag.llm.prompts import MATCH_BLOCK_HEADER
from professor_rag.rag.pipeline import ChatPipeline
from professor_rag.retrieval.retriever import ProfessorRetriever
from tests.helpers import make_match, make_stream

CONVERSATION = [
    {"role": "user", "content": "Hi"},
    {"role": "assistant", "content": "Hello! What are you looking for?"},
    {"role": "user", "content": "Who teaches algorithms well?"},
]


class FakeUpstream:
    """Mocked embedding, search and chat services behind a real pipeline."""

    def __init__(self, matches: list | None = None, deltas: tuple[str, ...] = ()) -> None:
        self.embedding_service = AsyncMock()
        self.embedding_service.embed = AsyncMock(
            return_value=EmbeddingResult(
                text="q",
                embedding=[0.1, 0.2, 0.3],
                model="test-model",
                dimensions=3,
            )
        )
        self.vector_store = AsyncMock()
        self.vector_store.query = AsyncMock(return_value=matches or [])
        self.chat_client = AsyncMock()
        self.chat_client.model_name = "test-model"
        self.chat_client.stream_chat = AsyncMock(side_effect=lambda _: make_stream(*deltas))
        self.closer = AsyncMock()

    def pipeline(self) -> ChatPipeline:
        return ChatPipeline(
            retriever=ProfessorRetriever(self.embedding_service, self.vector_store),
            chat_client=self.chat_client,
            closers=[self.closer],
        )

    def sent_messages(self) -> list:
        return self.chat_client.stream_chat.call_args.args[0]


@pytest.fixture
def upstream() -> Iterator[FakeUpstream]:
    """Install a fake upstream for the chat route."""
    fake = FakeUpstream(
        matches=[make_match("Dr. Alice Smith"), make_match("Dr. Bob Jones", stars=4)],
        deltas=("Try ", "Dr. Alice ", "Smith."),
    )
    app.dependency_overrides[get_pipeline] = fake.pipeline
    yield fake
    app.dependency_overrides.clear()


class TestParseConversation:
    """Tests for request body parsing."""

    def test_valid_body(self) -> None:
        """A JSON array of messages is parsed in order."""
        messages = parse_conversation(json.dumps(CONVERSATION).encode())
        assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT, Role.USER]
        assert messages[-1].content == "Who teaches algorithms well?"

    @pytest.mark.parametrize(
        "body",
        [b"", b"   ", b"not json", b"[]", b"{}", b'[{"role": "user"}]'],
    )
    def test_malformed_body(self, body: bytes) -> None:
        """Bodies that are not a non-empty conversation are rejected."""
        with pytest.raises(MalformedRequestError) as exc_info:
            parse_conversation(body)

        assert exc_info.value.code == ErrorCode.MALFORMED_REQUEST

    def test_unknown_role(self) -> None:
        """Unknown roles are reported in the error details."""
        body = json.dumps([{"role": "tool", "content": "x"}]).encode()

        with pytest.raises(MalformedRequestError) as exc_info:
            parse_conversation(body)

        assert exc_info.value.details["errors"]


class TestStatusCodes:
    """Tests for error code to HTTP status mapping."""

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.MALFORMED_REQUEST, 400),
            (ErrorCode.CHAT_RATE_LIMIT, 429),
            (ErrorCode.EMBEDDING_SERVICE_ERROR, 502),
            (ErrorCode.VECTOR_SEARCH_ERROR, 502),
            (ErrorCode.CHAT_SERVICE_ERROR, 502),
            (ErrorCode.CHAT_TIMEOUT, 504),
            (ErrorCode.CONFIGURATION_ERROR, 500),
        ],
    )
    def test_mapping(self, code: ErrorCode, status: int) -> None:
        """Each error code maps to its HTTP status."""
        assert get_status_code(code) == status


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    async def test_streams_answer(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Body is the concatenation of the streamed deltas."""
        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 200
        assert response.headers["content-type"] == STREAM_MEDIA_TYPE
        assert response.text == "Try Dr. Alice Smith."
        upstream.closer.assert_awaited_once()

    async def test_augments_last_message(
        self, client: AsyncClient, upstream: FakeUpstream
    ) -> None:
        """The model sees the system prompt, history and augmented last turn."""
        await client.post("/api/chat", json=CONVERSATION)

        upstream.embedding_service.embed.assert_called_once_with("Who teaches algorithms well?")
        upstream.vector_store.query.assert_called_once_with(vector=[0.1, 0.2, 0.3], top_k=3)

        messages = upstream.sent_messages()
        assert len(messages) == len(CONVERSATION) + 1
        assert messages[0].role == Role.SYSTEM
        assert [m.content for m in messages[1:3]] == [m["content"] for m in CONVERSATION[:2]]

        last = messages[-1].content
        assert last.startswith("Who teaches algorithms well?" + MATCH_BLOCK_HEADER)
        assert last.count("Professor:") == 2
        assert last.index("Dr. Alice Smith") < last.index("Dr. Bob Jones")

    async def test_no_matches(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """With no matches the header is still appended and chat still runs."""
        upstream.vector_store.query.return_value = []

        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 200
        last = upstream.sent_messages()[-1].content
        assert last == "Who teaches algorithms well?" + MATCH_BLOCK_HEADER

    async def test_empty_body(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Empty body returns 400 with no upstream calls."""
        response = await client.post("/api/chat", content=b"")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == ErrorCode.MALFORMED_REQUEST.value
        upstream.embedding_service.embed.assert_not_called()
        upstream.chat_client.stream_chat.assert_not_called()
        upstream.closer.assert_awaited_once()

    async def test_invalid_json(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Invalid JSON returns 400."""
        response = await client.post(
            "/api/chat",
            content=b"[{",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        upstream.embedding_service.embed.assert_not_called()

    async def test_empty_array(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """An empty conversation returns 400."""
        response = await client.post("/api/chat", json=[])

        assert response.status_code == 400
        upstream.embedding_service.embed.assert_not_called()

    async def test_embedding_failure(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Embedding failure returns 502 and skips search and chat."""
        upstream.embedding_service.embed.side_effect = EmbeddingProviderError("down")

        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == ErrorCode.EMBEDDING_SERVICE_ERROR.value
        upstream.vector_store.query.assert_not_called()
        upstream.chat_client.stream_chat.assert_not_called()
        upstream.closer.assert_awaited_once()

    async def test_search_failure(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Search failure returns 502 and skips chat."""
        upstream.vector_store.query.side_effect = VectorSearchError("index unavailable")

        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 502
        upstream.chat_client.stream_chat.assert_not_called()

    async def test_chat_failure(self, client: AsyncClient, upstream: FakeUpstream) -> None:
        """Chat failure before streaming returns a non-2xx JSON error."""
        upstream.chat_client.stream_chat.side_effect = ChatProviderError(
            "Chat service returned 500", details={"status_code": 500}
        )

        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 502
        assert response.json()["error"]["details"] == {"status_code": 500}

    async def test_missing_credentials(
        self, client: AsyncClient, upstream: FakeUpstream
    ) -> None:
        """Missing configuration returns 500."""
        upstream.embedding_service.embed.side_effect = ConfigurationError(
            "GEMINI_API_KEY is not set"
        )

        response = await client.post("/api/chat", json=CONVERSATION)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == ErrorCode.CONFIGURATION_ERROR.value
