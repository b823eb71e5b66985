"""LLM client module."""

from professor_rag.llm.client import (
    ChatClient,
    ChatCompletionStream,
    OpenAICompatibleChatClient,
)
from professor_rag.llm.models import Message, Role
from professor_rag.llm.prompts import SYSTEM_PROMPT, ProfessorPromptTemplate

__all__ = [
    "SYSTEM_PROMPT",
    "ChatClient",
    "ChatCompletionStream",
    "Message",
    "OpenAICompatibleChatClient",
    "ProfessorPromptTemplate",
    "Role",
]
