"""Conversation models shared by the API, the pipeline and the chat client."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a conversation turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One conversation turn as sent by the chat UI.

    Unknown keys from the client are dropped; content is kept verbatim,
    including empty strings.
    """

    model_config = ConfigDict(extra="ignore")

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    def to_payload(self) -> dict[str, str]:
        """Render the message in chat-completions wire format."""
        return {"role": self.role.value, "content": self.content}


# Request body of POST /api/chat
Conversation = Annotated[list[Message], Field(min_length=1)]
