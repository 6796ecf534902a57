"""
Client wiring.

Builds the storage, transport, session manager and gateway from Settings
and hands them out as one container.
"""

from typing import Optional

import httpx
from loguru import logger

from reviewhub.api_client import ApiClient
from reviewhub.config import Settings, get_settings
from reviewhub.dashboards import AdminDashboard, MyReviews, UserDashboard
from reviewhub.gateway import ReviewGateway
from reviewhub.models import Session
from reviewhub.session import SessionManager
from reviewhub.storage import JsonFileStorage, SessionStorage


class ReviewHubClient:
    """
    Container for the client components.

    Components are created on first access. Use as an async context manager
    to restore the session on entry and close the HTTP client on exit.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[SessionStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._storage = storage
        self._transport = transport
        self._api: Optional[ApiClient] = None
        self._session: Optional[SessionManager] = None
        self._gateway: Optional[ReviewGateway] = None

    @property
    def storage(self) -> SessionStorage:
        """Get session storage (JSON file from settings by default)."""
        if self._storage is None:
            self._storage = JsonFileStorage(self.settings.session_file)
        return self._storage

    @property
    def api(self) -> ApiClient:
        """Get API transport."""
        if self._api is None:
            self._api = ApiClient(
                base_url=self.settings.api_url,
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )
        return self._api

    @property
    def session(self) -> SessionManager:
        """Get session manager."""
        if self._session is None:
            self._session = SessionManager(api=self.api, storage=self.storage)
        return self._session

    @property
    def gateway(self) -> ReviewGateway:
        """Get authorized request gateway."""
        if self._gateway is None:
            self._gateway = ReviewGateway(session=self.session, api=self.api)
        return self._gateway

    def user_dashboard(self) -> UserDashboard:
        return UserDashboard(gateway=self.gateway)

    def my_reviews(self) -> MyReviews:
        return MyReviews(gateway=self.gateway)

    def admin_dashboard(self) -> AdminDashboard:
        return AdminDashboard(gateway=self.gateway)

    async def start(self) -> Session:
        """Restore the persisted session."""
        logger.info(f"Starting ReviewHub client against {self.settings.api_url}")
        return await self.session.restore()

    async def close(self) -> None:
        if self._api is not None:
            await self._api.aclose()

    async def __aenter__(self) -> "ReviewHubClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def create_client(
    settings: Optional[Settings] = None,
    storage: Optional[SessionStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ReviewHubClient:
    """Create a client container; call start() (or use `async with`) before issuing requests."""
    return ReviewHubClient(settings=settings, storage=storage, transport=transport)
