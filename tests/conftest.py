"""
Pytest configuration and fixtures for ReviewHub client tests.
"""

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from reviewhub.api_client import ApiClient
from reviewhub.config import Settings
from reviewhub.gateway import ReviewGateway
from reviewhub.session import SessionManager
from reviewhub.storage import MemoryStorage

from tests.fake_backend import FakeBackend


ADMIN_NAME = "Abiel Robinson"
ADMIN_PIN = "0000"
USER_NAME = "Jane Doe"
USER_PIN = "4821"


# =============================================================================
# Test Settings
# =============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Return settings configured for testing."""
    return Settings(
        api_url="http://test",
        request_timeout=None,
        session_file=str(tmp_path / "session.json"),
        log_level="DEBUG",
        environment="test",
    )


# =============================================================================
# Backend Fixtures
# =============================================================================

@pytest.fixture
def backend() -> FakeBackend:
    """Fake platform with one admin and one registered user."""
    fake = FakeBackend()
    fake.add_user(ADMIN_NAME, ADMIN_PIN, role="admin")
    fake.add_user(USER_NAME, USER_PIN)
    return fake


@pytest.fixture
def transport(backend) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=backend.app)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture
async def api(transport) -> AsyncGenerator[ApiClient, None]:
    """API client talking to the fake backend."""
    client = ApiClient(base_url="http://test", transport=transport)
    yield client
    await client.aclose()


@pytest.fixture
def session_manager(api, storage) -> SessionManager:
    return SessionManager(api=api, storage=storage)


@pytest.fixture
def gateway(session_manager, api) -> ReviewGateway:
    return ReviewGateway(session=session_manager, api=api)


@pytest_asyncio.fixture
async def restored(session_manager) -> SessionManager:
    """Session manager after a restore with empty storage."""
    await session_manager.restore()
    return session_manager


@pytest_asyncio.fixture
async def user_session(restored) -> SessionManager:
    """Session manager logged in as the regular user."""
    result = await restored.login(USER_NAME, USER_PIN)
    assert result.success, result.error
    return restored


@pytest_asyncio.fixture
async def admin_session(restored) -> SessionManager:
    """Session manager logged in as the admin."""
    result = await restored.login(ADMIN_NAME, ADMIN_PIN, as_admin=True)
    assert result.success, result.error
    return restored


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_review_data() -> dict:
    """Valid review draft."""
    return {
        "book_title": "Dune",
        "author": "Frank Herbert",
        "rating": 5,
        "genre": "Science Fiction",
        "review_text": "A sweeping desert epic about power and ecology.",
    }


@pytest.fixture
def sample_reviews_batch() -> list[dict]:
    """Several reviews across genres and ratings."""
    return [
        {
            "book_title": "Gone Girl",
            "author": "Gillian Flynn",
            "rating": 4,
            "genre": "Mystery",
            "review_text": "Twisty and unsettling from start to finish.",
        },
        {
            "book_title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "rating": 5,
            "genre": "Fantasy",
            "review_text": "A cozy adventure that still holds up.",
        },
        {
            "book_title": "Sapiens",
            "author": "Yuval Noah Harari",
            "rating": 3,
            "genre": "History",
            "review_text": "Big ideas, uneven evidence in places.",
        },
    ]
