"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from professor_rag.api.app import app
from professor_rag.config import get_settings


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def fresh_settings() -> Iterator[None]:
    """Clear the settings cache before and after a test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
