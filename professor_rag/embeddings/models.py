"""Embedding data models."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EmbeddingResult(BaseModel):
    """Query vector returned by the embedding provider.

    ``text`` is the message content exactly as it was sent, so the
    vector can be traced back to the turn it came from.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Embedded message content")
    embedding: list[float] = Field(description="Query vector")
    model: str = Field(description="Embedding model name")
    dimensions: int = Field(ge=0, description="Vector length")

    @model_validator(mode="after")
    def _check_dimensions(self) -> "EmbeddingResult":
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )
        return self
