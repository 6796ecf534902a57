"""
Session Manager for the ReviewHub client.

Single source of truth for who is signed in:
- Restores a persisted session at startup
- Logs in (user or admin endpoint) and persists the session
- Hands registration off to the backend, which issues the PIN
- Logs out, clearing storage and memory

State machine:
    UNINITIALIZED --restore--> LOGGED_OUT | LOGGED_IN
    LOGGED_OUT --login--> LOGGED_IN
    LOGGED_IN --login--> LOGGED_IN (replaces the previous session)
    LOGGED_IN --logout--> LOGGED_OUT

The in-memory Session is an immutable snapshot, replaced as a whole on every
transition. Storage is written before memory is updated.
"""

import asyncio
from typing import Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from reviewhub.api_client import ApiClient
from reviewhub.errors import (
    ReviewHubError,
    Result,
    ServerError,
    StorageError,
    ValidationError,
)
from reviewhub.models import (
    AuthResponse,
    Credentials,
    Registration,
    Session,
    SessionState,
    User,
)
from reviewhub.storage import TOKEN_KEY, USER_KEY, SessionStorage


LOGIN_PATH = "/auth/login"
ADMIN_LOGIN_PATH = "/auth/admin/login"
REGISTER_PATH = "/auth/register"

SESSION_KEYS = (TOKEN_KEY, USER_KEY)


class SessionManager:
    """
    Owns the credential lifecycle.

    Every public operation reports through a Result (restore returns the
    Session directly and never fails).
    """

    def __init__(self, api: ApiClient, storage: SessionStorage):
        """
        Initialize session manager.

        Args:
            api: Transport used for the auth endpoints
            storage: Durable store for the token and user snapshot
        """
        self.api = api
        self.storage = storage
        self._session = Session.uninitialized()
        self._ready = asyncio.Event()
        self._transitions = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def user(self) -> Optional[User]:
        return self._session.user

    @property
    def loading(self) -> bool:
        return self._session.loading

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_admin(self) -> bool:
        return self._session.is_admin

    async def wait_until_ready(self) -> None:
        """Block until restore (or an explicit login/logout) has settled the session."""
        await self._ready.wait()

    def _replace(self, session: Session) -> None:
        self._session = session
        self._transitions += 1
        self._ready.set()

    # -------------------------------------------------------------------------
    # Restore
    # -------------------------------------------------------------------------

    async def restore(self) -> Session:
        """
        Load the persisted session.

        Missing, partial or corrupt data yields a logged-out session and is
        removed from storage. Never raises.

        Returns:
            The session now in effect
        """
        started_at = self._transitions
        discarded = False

        try:
            stored = await self.storage.get_many(SESSION_KEYS)
            session = self._session_from_storage(stored)
        except Exception as e:
            if self._transitions != started_at:
                # Storage now holds the newer session, not the bad data
                logger.debug(f"Restore superseded after read failure: {type(e).__name__}")
                return self._session
            logger.warning(f"Discarding persisted session: {type(e).__name__}: {e}")
            session = Session.empty()
            await self._discard_persisted()
            discarded = True

        if self._transitions != started_at:
            # A login or logout finished while storage was being read
            logger.debug("Restore superseded by a newer session transition")
            if discarded:
                await self._write_current()
            return self._session

        self._replace(session)
        if session.is_authenticated:
            logger.info(f"Restored session for user {session.user.id} ({session.user.role.value})")
        else:
            logger.info("No persisted session; starting logged out")
        return session

    @staticmethod
    def _session_from_storage(stored: dict[str, Optional[str]]) -> Session:
        token = stored.get(TOKEN_KEY)
        raw_user = stored.get(USER_KEY)

        if not token and not raw_user:
            return Session.empty()
        if not token or not raw_user:
            raise StorageError("Persisted session is incomplete")

        return Session(token=token, user=User.model_validate_json(raw_user))

    async def _discard_persisted(self) -> None:
        try:
            await self.storage.remove_many(SESSION_KEYS)
        except Exception as e:
            logger.error(f"Failed to clear persisted session: {e}")

    async def _write_current(self) -> None:
        """Re-persist the in-memory session after a clear that raced a login."""
        if not self._session.is_authenticated:
            return
        try:
            await self.storage.set_many({
                TOKEN_KEY: self._session.token,
                USER_KEY: self._session.user.model_dump_json(),
            })
        except Exception as e:
            logger.error(f"Failed to re-persist session: {e}")

    # -------------------------------------------------------------------------
    # Login / Register / Logout
    # -------------------------------------------------------------------------

    async def login(self, full_name: str, pin_code: str, as_admin: bool = False) -> Result:
        """
        Authenticate and persist the session.

        Args:
            full_name: Registered full name
            pin_code: PIN issued at registration
            as_admin: Use the admin login endpoint

        Returns:
            Result with the new Session as data
        """
        try:
            credentials = Credentials.parse(full_name, pin_code, require_pin_format=not as_admin)
            path = ADMIN_LOGIN_PATH if as_admin else LOGIN_PATH
            payload = await self.api.post(path, json=credentials.model_dump())
            auth = self._parse_auth(payload)

            if as_admin and not auth.user.is_admin:
                # The server's role is authoritative; record the mismatch only.
                logger.warning(
                    f"Admin login for user {auth.user.id} returned role '{auth.user.role.value}'"
                )

            session = Session(token=auth.access_token, user=auth.user)
            await self._persist(session)
        except Exception as e:
            result = Result.from_exception(e, "Login failed")
            logger.warning(f"Login failed: {result.error}")
            return result

        self._replace(session)
        logger.info(f"Logged in user {session.user.id} as {session.user.role.value}")
        return Result.ok(session)

    @staticmethod
    def _parse_auth(payload) -> AuthResponse:
        try:
            return AuthResponse.model_validate(payload)
        except PydanticValidationError as e:
            raise ServerError("Malformed login response", detail=str(e)) from e

    async def _persist(self, session: Session) -> None:
        """Write token and user together, restoring the previous pair on failure."""
        try:
            previous = await self.storage.get_many(SESSION_KEYS)
        except Exception:
            previous = {}

        try:
            await self.storage.set_many({
                TOKEN_KEY: session.token,
                USER_KEY: session.user.model_dump_json(),
            })
        except Exception as e:
            await self._rollback(previous)
            if isinstance(e, StorageError):
                raise
            raise StorageError("Failed to persist session", detail=str(e)) from e

    async def _rollback(self, previous: dict[str, Optional[str]]) -> None:
        try:
            if previous.get(TOKEN_KEY) and previous.get(USER_KEY):
                await self.storage.set_many({key: previous[key] for key in SESSION_KEYS})
            else:
                await self.storage.remove_many(SESSION_KEYS)
        except Exception as e:
            logger.error(f"Failed to roll back persisted session: {e}")

    async def register(self, full_name: str) -> Result:
        """
        Request a new account.

        The backend generates and returns the PIN; nothing is persisted and
        the caller stays logged out.

        Returns:
            Result with the Registration (holding the PIN) as data
        """
        try:
            if not full_name or not full_name.strip():
                raise ValidationError("Please enter your name", field="full_name")

            payload = await self.api.post(REGISTER_PATH, json={"full_name": full_name})
            try:
                registration = Registration.model_validate(payload)
            except PydanticValidationError as e:
                raise ServerError("Malformed registration response", detail=str(e)) from e
        except Exception as e:
            result = Result.from_exception(e, "Registration failed")
            logger.warning(f"Registration failed: {result.error}")
            return result

        logger.info("Registration succeeded; PIN issued")
        return Result.ok(registration)

    async def logout(self) -> Result:
        """
        Clear the session from storage and memory.

        Idempotent. The in-memory session is cleared even when storage
        fails, so no later request can carry the old token.
        """
        error: Optional[ReviewHubError] = None
        try:
            await self.storage.remove_many(SESSION_KEYS)
        except Exception as e:
            logger.error(f"Failed to clear persisted session: {e}")
            error = e if isinstance(e, ReviewHubError) else StorageError(detail=str(e))

        was_logged_in = self.is_authenticated
        self._replace(Session.empty())

        if error is not None:
            return Result.from_exception(error, "Logout failed")

        if was_logged_in:
            logger.info("Logged out")
        return Result.ok()
