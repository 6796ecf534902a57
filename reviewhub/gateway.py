"""
Authorized Request Gateway

Role-scoped review platform operations. Each call reads the session token
at call time and builds its own Authorization header; with no session the
call fails before anything is sent.

User scope (any signed-in role):
- list_reviews, list_my_reviews
- create_review, update_review, delete_review

Admin scope (the backend enforces the role):
- list_users, delete_user
- list_all_reviews, archive_review
"""

from typing import Any, Callable, Optional, Union

from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from reviewhub.api_client import ApiClient
from reviewhub.errors import AuthenticationError, Result, ServerError, ValidationError
from reviewhub.models import Review, ReviewDraft, ReviewFilter, User
from reviewhub.session import SessionManager


ReviewListAdapter = TypeAdapter(list[Review])
UserListAdapter = TypeAdapter(list[User])


class ReviewGateway:
    """Token-stamping facade over the review platform API."""

    def __init__(self, session: SessionManager, api: ApiClient):
        """
        Initialize gateway.

        Args:
            session: Session manager the token is read from on every call
            api: Transport shared with the session manager
        """
        self.session = session
        self.api = api

    async def _call(
        self,
        method: str,
        path: str,
        fallback: str,
        parse: Optional[Callable[[Any], Any]] = None,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        draft: Optional[Union[ReviewDraft, dict]] = None,
    ) -> Result:
        """
        Run one authorized request and fold every outcome into a Result.

        Args:
            method: HTTP method
            path: API path
            fallback: Message used when the failure has no user-facing text
            parse: Converts the decoded body into the Result's data
            json: Request body
            params: Query parameters
            draft: Review payload validated before anything is sent
        """
        try:
            if draft is not None:
                json = ReviewDraft.parse(draft).to_payload()

            await self.session.wait_until_ready()
            token = self.session.token
            if not token:
                raise AuthenticationError()

            body = await self.api.request(method, path, json=json, params=params, token=token)
            data = self._parse(parse, body) if parse else body
        except Exception as e:
            result = Result.from_exception(e, fallback)
            logger.warning(f"{method} {path} failed: {result.code.value}: {result.error}")
            return result

        return Result.ok(data)

    @staticmethod
    def _parse(parse: Callable[[Any], Any], body: Any) -> Any:
        try:
            return parse(body)
        except PydanticValidationError as e:
            raise ServerError("Malformed response", detail=str(e)) from e

    # =========================================================================
    # User Scope
    # =========================================================================

    async def list_reviews(self, filter: Optional[Union[ReviewFilter, dict]] = None) -> Result:
        """
        List visible reviews, filtered and ordered by the server.

        Args:
            filter: Optional search / genre / rating filter

        Returns:
            Result with a list of Review
        """
        try:
            params = ReviewFilter.parse(filter).to_params() if filter else {}
        except ValidationError as e:
            return Result.from_exception(e, "Failed to load reviews")

        return await self._call(
            "GET", "/reviews", "Failed to load reviews",
            parse=ReviewListAdapter.validate_python, params=params or None,
        )

    async def list_my_reviews(self) -> Result:
        """List reviews owned by the signed-in user."""
        return await self._call(
            "GET", "/reviews/my-reviews", "Failed to load your reviews",
            parse=ReviewListAdapter.validate_python,
        )

    async def create_review(self, draft: Union[ReviewDraft, dict]) -> Result:
        """
        Create a review owned by the signed-in user.

        Invalid drafts are rejected without a request.

        Returns:
            Result with the created Review
        """
        return await self._call(
            "POST", "/reviews", "Failed to save review",
            parse=Review.model_validate, draft=draft,
        )

    async def update_review(self, review_id: int, draft: Union[ReviewDraft, dict]) -> Result:
        """Replace the content of one of the user's reviews."""
        return await self._call(
            "PUT", f"/reviews/{review_id}", "Failed to save review",
            parse=Review.model_validate, draft=draft,
        )

    async def delete_review(self, review_id: int) -> Result:
        """Delete one of the user's reviews; ownership is checked by the server."""
        return await self._call("DELETE", f"/reviews/{review_id}", "Failed to delete review")

    # =========================================================================
    # Admin Scope
    # =========================================================================

    async def list_users(self) -> Result:
        """List every user account."""
        return await self._call(
            "GET", "/admin/users", "Failed to load users",
            parse=UserListAdapter.validate_python,
        )

    async def delete_user(self, user_id: int) -> Result:
        """Delete a user; the backend removes their reviews with them."""
        return await self._call("DELETE", f"/admin/users/{user_id}", "Failed to delete user")

    async def list_all_reviews(self) -> Result:
        """List every review, archived ones included."""
        return await self._call(
            "GET", "/admin/reviews", "Failed to load reviews",
            parse=ReviewListAdapter.validate_python,
        )

    async def archive_review(self, review_id: int) -> Result:
        """
        Archive a review. Idempotent; there is no unarchive.

        Returns:
            Result with the archived Review
        """
        return await self._call(
            "POST", f"/admin/reviews/{review_id}/archive", "Failed to archive review",
            parse=Review.model_validate,
        )
