import os

# app.main loads settings on import and refuses to start without a key
os.environ.setdefault("TMDB_API_KEY", "test-api-key")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import app
from app.services.tmdb import TMDBClient, get_tmdb_client
from factories import FakeResponse, page


@pytest.fixture
def settings():
    return Settings(tmdb_api_key="test-key")


@pytest.fixture
def session():
    """Session mock; set ``session.get.return_value`` per test."""
    mock = MagicMock()
    mock.get = AsyncMock(return_value=FakeResponse(page([])))
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def tmdb_client(settings, session):
    """A real TMDBClient over a mocked session."""
    return TMDBClient(settings, session=session)


@pytest.fixture
def fake_tmdb():
    """A TMDBClient double whose coroutines are AsyncMocks."""
    return MagicMock(spec=TMDBClient)


@pytest.fixture
def client(fake_tmdb):
    """TestClient with the TMDB dependency replaced by ``fake_tmdb``."""
    app.dependency_overrides[get_tmdb_client] = lambda: fake_tmdb
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anyio_backend():
    """The app is built on asyncio (asyncio.gather), so run async tests there."""
    return "asyncio"
