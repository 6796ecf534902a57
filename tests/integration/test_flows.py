"""
Integration tests for end-to-end client flows against the fake backend.
"""

import httpx
import pytest

from reviewhub import SessionState, create_client
from reviewhub.errors import ErrorCode
from reviewhub.models import Role

from tests.fake_backend import FakeBackend

pytestmark = pytest.mark.asyncio


@pytest.fixture
def platform() -> FakeBackend:
    fake = FakeBackend(pins=["4821"])
    fake.add_user("Abiel Robinson", "0000", role="admin")
    return fake


@pytest.fixture
def make_client(platform, test_settings):
    """Factory for clients sharing one backend and one session file."""
    def factory():
        return create_client(
            settings=test_settings,
            transport=httpx.ASGITransport(app=platform.app),
        )
    return factory


class TestRegistrationFlow:
    """Register, receive a PIN, log in."""

    async def test_register_then_login(self, make_client):
        async with make_client() as client:
            registration = await client.session.register("Jane Doe")
            assert registration.success
            assert registration.data.pin == "4821"
            assert client.session.state == SessionState.LOGGED_OUT

            login = await client.session.login("Jane Doe", registration.data.pin)

            assert login.success
            assert client.session.user.role == Role.USER


class TestAdminFlow:
    """Admin login and user management."""

    async def test_admin_can_list_users(self, make_client):
        async with make_client() as client:
            login = await client.session.login("Abiel Robinson", "0000", as_admin=True)
            assert login.success
            assert client.session.user.role == Role.ADMIN

            users = await client.gateway.list_users()

            assert users.success
            assert [u.full_name for u in users.data] == ["Abiel Robinson"]

    async def test_list_users_while_logged_out(self, make_client):
        async with make_client() as client:
            result = await client.gateway.list_users()

            assert not result.success
            assert result.code == ErrorCode.AUTHENTICATION

    async def test_moderation_round_trip(self, make_client, platform):
        author = platform.add_user("Jane Doe", "1111")

        async with make_client() as client:
            await client.session.login("Jane Doe", "1111")
            created = await client.gateway.create_review({
                "book_title": "Dune",
                "author": "Herbert",
                "rating": 5,
                "genre": "Science Fiction",
                "review_text": "Unforgettable world-building.",
            })
            assert created.success
            await client.session.logout()

            await client.session.login("Abiel Robinson", "0000", as_admin=True)
            admin = client.admin_dashboard()
            await admin.refresh()
            await admin.archive(created.data.id)
            await client.session.logout()

            await client.session.login("Jane Doe", "1111")
            feed = client.user_dashboard()
            await feed.refresh()
            mine = client.my_reviews()
            await mine.refresh()

            assert feed.reviews == []
            assert [r.is_archived for r in mine.reviews] == [True]
            assert author.id in platform.users


class TestPersistence:
    """Session survives a client restart."""

    async def test_restart_restores_session_without_login(self, make_client, platform):
        async with make_client() as first:
            await first.session.login("Abiel Robinson", "0000", as_admin=True)
            token = first.session.token

        logins = sum(1 for r in platform.requests if r.path.startswith("/auth"))

        async with make_client() as second:
            assert second.session.state == SessionState.LOGGED_IN
            assert second.session.token == token
            assert (await second.gateway.list_all_reviews()).success

        assert sum(1 for r in platform.requests if r.path.startswith("/auth")) == logins

    async def test_logout_survives_restart(self, make_client, platform):
        async with make_client() as first:
            await first.session.login("Abiel Robinson", "0000", as_admin=True)
            await first.session.logout()

        async with make_client() as second:
            assert second.session.state == SessionState.LOGGED_OUT
            sent = len(platform.requests)

            result = await second.gateway.list_users()

            assert result.code == ErrorCode.AUTHENTICATION
            assert len(platform.requests) == sent


class TestClientValidation:
    """Invalid drafts never leave the client."""

    async def test_out_of_range_rating_rejected_before_request(self, make_client, platform):
        async with make_client() as client:
            await client.session.login("Abiel Robinson", "0000", as_admin=True)
            sent = len(platform.requests)

            result = await client.gateway.create_review({
                "book_title": "Dune",
                "author": "Herbert",
                "rating": 6,
                "genre": "Science Fiction",
                "review_text": "Unforgettable world-building.",
            })

            assert result.code == ErrorCode.VALIDATION
            assert len(platform.requests) == sent
