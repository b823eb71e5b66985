"""Chat pipeline: retrieve professors, augment the query, relay the stream."""

from collections.abc import AsyncIterator, Awaitable, Callable, Sequence

import httpx

from professor_rag.config import Settings, VectorProvider, get_settings
from professor_rag.embeddings.service import GeminiEmbeddingService
from professor_rag.exceptions import MalformedRequestError
from professor_rag.llm.client import ChatClient, ChatCompletionStream, OpenAICompatibleChatClient
from professor_rag.llm.models import Message
from professor_rag.llm.prompts import ProfessorPromptTemplate
from professor_rag.logging_config import get_logger
from professor_rag.observability.metrics import track_stream_completed
from professor_rag.retrieval.retriever import DEFAULT_TOP_K, ProfessorRetriever, Retriever
from professor_rag.vectorstore.service import (
    PineconeVectorStore,
    QdrantVectorStore,
    VectorStore,
)

logger = get_logger(__name__)

Closer = Callable[[], Awaitable[None]]


class ChatPipeline:
    """Answers one conversation with retrieval-augmented streaming.

    Steps run strictly in order: embed and search (via the retriever),
    augment the last message, open the chat stream, relay deltas. A
    failure at any step stops every later remote call.
    """

    def __init__(
        self,
        retriever: Retriever,
        chat_client: ChatClient,
        prompt_template: ProfessorPromptTemplate | None = None,
        closers: Sequence[Closer] = (),
    ) -> None:
        """Initialize the pipeline.

        Args:
            retriever: Professor retriever.
            chat_client: Streaming chat completion client.
            prompt_template: Builds the outgoing message list.
            closers: Callbacks releasing per-request clients.
        """
        self._retriever = retriever
        self._chat_client = chat_client
        self._prompt_template = prompt_template or ProfessorPromptTemplate()
        self._closers = list(closers)

    async def build_messages(self, conversation: Sequence[Message]) -> list[Message]:
        """Retrieve matches for the last message and build the outgoing list.

        Raises:
            MalformedRequestError: If the conversation is empty.
            EmbeddingProviderError: If the query cannot be embedded.
            VectorSearchError: If the professor search fails.
        """
        if not conversation:
            raise MalformedRequestError("Conversation must contain at least one message")

        query = conversation[-1].content
        logger.info(
            "Processing chat request",
            extra={"turns": len(conversation), "query_length": len(query)},
        )

        matches = await self._retriever.retrieve(query, top_k=DEFAULT_TOP_K)
        return self._prompt_template.build_messages(conversation, matches)

    async def open_stream(self, conversation: Sequence[Message]) -> ChatCompletionStream:
        """Run every pre-stream step and establish the chat stream.

        Raises:
            ChatProviderError: If the chat stream cannot be established,
                in addition to the errors of build_messages.
        """
        messages = await self.build_messages(conversation)
        return await self._chat_client.stream_chat(messages)

    async def relay(self, stream: ChatCompletionStream) -> AsyncIterator[bytes]:
        """Forward each delta as UTF-8 bytes as soon as it arrives.

        Errors are re-raised so the response is aborted rather than
        truncated. The stream and per-request clients are always closed.
        """
        chunks = 0
        success = False
        try:
            async for delta in stream:
                chunks += 1
                yield delta.encode("utf-8")
            success = True
        finally:
            track_stream_completed(stream.model, chunks, success)
            if success:
                logger.info("Chat stream completed", extra={"chunks": chunks})
            await stream.aclose()
            await self.close()

    async def close(self) -> None:
        """Release per-request clients."""
        for closer in self._closers:
            await closer()
        self._closers.clear()


def create_vector_store(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> VectorStore:
    """Create the vector store selected by ``VECTOR_PROVIDER``."""
    if settings.vector_provider == VectorProvider.QDRANT:
        return QdrantVectorStore(settings=settings.qdrant)
    return PineconeVectorStore(settings=settings.pinecone, client=http_client)


def create_pipeline(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ChatPipeline:
    """Build a pipeline with fresh clients for one request.

    One HTTP client is shared by the embedding, Pinecone and chat calls
    and closed with the pipeline.
    """
    settings = settings or get_settings()
    http_client = http_client or httpx.AsyncClient(timeout=settings.gemini.timeout)

    vector_store = create_vector_store(settings, http_client)
    retriever = ProfessorRetriever(
        embedding_service=GeminiEmbeddingService(settings=settings.gemini, client=http_client),
        vector_store=vector_store,
    )
    chat_client = OpenAICompatibleChatClient(settings=settings.gemini, client=http_client)

    return ChatPipeline(
        retriever=retriever,
        chat_client=chat_client,
        closers=[vector_store.close, http_client.aclose],
    )
