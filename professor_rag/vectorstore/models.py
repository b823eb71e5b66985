"""Vector store data models."""

from pydantic import BaseModel, ConfigDict, Field


class ProfessorMetadata(BaseModel):
    """Metadata stored alongside each professor vector.

    Unknown fields from the provider are kept but not used.
    """

    model_config = ConfigDict(extra="allow")

    subject: str = Field(default="", description="Department or subject taught")
    stars: float = Field(default=0.0, description="Numeric rating")
    review: str | None = Field(default=None, description="Review text, if indexed")


class ProfessorMatch(BaseModel):
    """One nearest-neighbour hit from the professor index.

    Attributes:
        id: Professor identifier (usually the professor's name).
        score: Similarity score (higher is more similar).
        metadata: Subject, rating and optional review.
    """

    id: str = Field(description="Professor identifier")
    score: float = Field(default=0.0, description="Similarity score")
    metadata: ProfessorMetadata = Field(
        default_factory=ProfessorMetadata,
        description="Professor metadata",
    )
