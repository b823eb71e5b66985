"""API routes for professor chat."""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from professor_rag.exceptions import MalformedRequestError
from professor_rag.llm.models import Conversation, Message
from professor_rag.logging_config import get_logger
from professor_rag.rag.pipeline import ChatPipeline, create_pipeline

logger = get_logger(__name__)

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"

router = APIRouter(prefix="/api", tags=["Chat"])

_conversation_adapter: TypeAdapter[list[Message]] = TypeAdapter(Conversation)


def parse_conversation(body: bytes) -> list[Message]:
    """Parse a raw request body into a conversation.

    Args:
        body: Raw request bytes.

    Returns:
        Non-empty list of messages.

    Raises:
        MalformedRequestError: If the body is empty, not JSON, or not a
            non-empty array of role/content messages.
    """
    if not body.strip():
        raise MalformedRequestError("Request body is empty")

    try:
        data: Any = json.loads(body)
    except ValueError as e:
        raise MalformedRequestError(
            "Request body is not valid JSON",
            details={"error": str(e)},
        ) from e

    try:
        return _conversation_adapter.validate_python(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise MalformedRequestError(
            "Request body is not a valid conversation",
            details={"errors": errors},
        ) from e


def get_pipeline() -> ChatPipeline:
    """Build a fresh pipeline for the current request."""
    return create_pipeline()


@router.post("/chat", response_class=StreamingResponse)
async def chat_endpoint(
    request: Request,
    pipeline: Annotated[ChatPipeline, Depends(get_pipeline)],
) -> StreamingResponse:
    """Answer a conversation with a streamed, retrieval-augmented reply.

    Failures before streaming starts become JSON error responses through
    the application exception handler. Failures after that abort the
    connection.
    """
    try:
        conversation = parse_conversation(await request.body())
        stream = await pipeline.open_stream(conversation)
    except Exception:
        await pipeline.close()
        raise

    return StreamingResponse(pipeline.relay(stream), media_type=STREAM_MEDIA_TYPE)
