"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class VectorProvider(str, Enum):
    """Vector database backing the professor index."""

    PINECONE = "pinecone"
    QDRANT = "qdrant"


class GeminiSettings(BaseSettings):
    """Generative AI provider configuration.

    Both embeddings and chat completions go through Gemini's
    OpenAI-compatible API.
    """

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    api_key: SecretStr | None = Field(
        default=None,
        description="Gemini API key",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai",
        description="OpenAI-compatible API base URL",
    )
    chat_model: str = Field(
        default="gemini-pro",
        description="Model used for chat completions",
    )
    embedding_model: str = Field(
        default="text-embedding-004",
        description="Model used for query embeddings",
    )
    timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds",
    )


class PineconeSettings(BaseSettings):
    """Pinecone vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="PINECONE_")

    api_key: SecretStr | None = Field(
        default=None,
        description="Pinecone API key",
    )
    index_host: str | None = Field(
        default=None,
        description="Data-plane host of the professor index",
    )
    namespace: str = Field(
        default="ns1",
        description="Index namespace holding professor records",
    )
    api_version: str = Field(
        default="2024-07",
        description="Value for the X-Pinecone-API-Version header",
    )
    timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="professors",
        description="Collection holding professor records",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    vector_provider: VectorProvider = Field(
        default=VectorProvider.PINECONE,
        description="Vector database used for professor search",
    )

    # Nested settings
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    pinecone: PineconeSettings = Field(default_factory=PineconeSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)

    def missing_credentials(self) -> list[str]:
        """List the environment variables required but not set."""
        missing: list[str] = []
        if self.gemini.api_key is None:
            missing.append("GEMINI_API_KEY")
        if self.vector_provider == VectorProvider.PINECONE:
            if self.pinecone.api_key is None:
                missing.append("PINECONE_API_KEY")
            if not self.pinecone.index_host:
                missing.append("PINECONE_INDEX_HOST")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
