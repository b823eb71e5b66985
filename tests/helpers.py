"""Builders shared by the test modules."""

import json
from collections.abc import AsyncIterator

import httpx

from professor_rag.llm.client import ChatCompletionStream
from professor_rag.vectorstore.models import ProfessorMatch


def sse_body(*deltas: str | None, done: bool = True) -> bytes:
    """Encode deltas as an OpenAI-style server-sent event body.

    A None delta becomes a chunk with no text content.
    """
    lines = []
    for delta in deltas:
        body = {} if delta is None else {"content": delta}
        chunk = {"choices": [{"index": 0, "delta": body}]}
        lines.append(f"data: {json.dumps(chunk)}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def make_stream(*deltas: str | None, model: str = "test-model") -> ChatCompletionStream:
    """Build an established stream that yields the given deltas."""
    response = httpx.Response(200, content=sse_body(*deltas))
    return ChatCompletionStream(response, model=model)


def make_broken_stream(*deltas: str, model: str = "test-model") -> ChatCompletionStream:
    """Build a stream that fails after sending the given deltas."""

    async def body() -> AsyncIterator[bytes]:
        yield sse_body(*deltas, done=False)
        raise httpx.ReadError("connection reset")

    response = httpx.Response(200, content=body())
    return ChatCompletionStream(response, model=model)


def make_match(
    professor: str,
    subject: str = "Computer Science",
    stars: float = 5,
    score: float = 0.9,
) -> ProfessorMatch:
    """Build a professor match."""
    return ProfessorMatch(
        id=professor,
        score=score,
        metadata={"subject": subject, "stars": stars},
    )
