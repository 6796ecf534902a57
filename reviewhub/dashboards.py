"""
Dashboard state holders.

Framework-free list state for the three review screens. Each holder calls
the gateway, keeps the last successful response, and reconciles its local
list after a successful mutation. Concurrent refreshes are not sequenced:
whichever response arrives last wins.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from loguru import logger

from reviewhub.errors import ErrorCode, Result, ValidationError
from reviewhub.gateway import ReviewGateway
from reviewhub.models import Review, ReviewFilter, User


@dataclass
class DashboardStats:
    """Admin dashboard counters."""
    total_users: int = 0
    active_reviews: int = 0
    archived_reviews: int = 0


@dataclass
class UserDashboard:
    """Public review feed with search and filters."""

    gateway: ReviewGateway
    filter: ReviewFilter = field(default_factory=ReviewFilter)
    reviews: list[Review] = field(default_factory=list)

    async def refresh(self) -> Result:
        result = await self.gateway.list_reviews(self.filter)
        if result.success:
            self.reviews = result.data
        return result

    async def set_filter(self, filter: Union[ReviewFilter, dict, None] = None) -> Result:
        """Replace the filter and reload; None clears all filters."""
        try:
            self.filter = ReviewFilter.parse(filter) if filter else ReviewFilter()
        except ValidationError as e:
            return Result.from_exception(e, "Failed to load reviews")
        return await self.refresh()


@dataclass
class MyReviews:
    """Reviews owned by the signed-in user."""

    gateway: ReviewGateway
    reviews: list[Review] = field(default_factory=list)

    async def refresh(self) -> Result:
        result = await self.gateway.list_my_reviews()
        if result.success:
            self.reviews = result.data
        return result

    async def delete(self, review_id: int) -> Result:
        result = await self.gateway.delete_review(review_id)
        if result.success:
            self.reviews = [r for r in self.reviews if r.id != review_id]
        return result

    @property
    def count_label(self) -> str:
        count = len(self.reviews)
        return f"{count} review{'' if count == 1 else 's'}"


@dataclass
class AdminDashboard:
    """
    User management and review moderation.

    The signed-in admin cannot delete their own account from here; the
    backend is expected to refuse it too.
    """

    gateway: ReviewGateway
    users: list[User] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)

    @property
    def current_user_id(self) -> Optional[int]:
        user = self.gateway.session.user
        return user.id if user else None

    async def refresh(self) -> Result:
        """Load users and all reviews; stops at the first failure."""
        users = await self.gateway.list_users()
        if not users.success:
            return users
        self.users = users.data

        reviews = await self.gateway.list_all_reviews()
        if not reviews.success:
            return reviews
        self.reviews = reviews.data

        return Result.ok(self.stats())

    def can_delete(self, user: User) -> bool:
        return user.id != self.current_user_id

    async def delete_user(self, user_id: int) -> Result:
        if user_id == self.current_user_id:
            logger.warning("Refusing to delete the signed-in admin account")
            return Result.fail("You cannot delete your own account", ErrorCode.VALIDATION)

        result = await self.gateway.delete_user(user_id)
        if result.success:
            self.users = [u for u in self.users if u.id != user_id]
            self.reviews = [r for r in self.reviews if r.user_id != user_id]
        return result

    async def archive(self, review_id: int) -> Result:
        result = await self.gateway.archive_review(review_id)
        if result.success:
            self.reviews = [
                r.model_copy(update={"is_archived": True}) if r.id == review_id else r
                for r in self.reviews
            ]
        return result

    def search_users(self, text: str) -> list[User]:
        """Match users by name or role, case-insensitively."""
        needle = text.strip().lower()
        if not needle:
            return list(self.users)
        return [
            u for u in self.users
            if needle in u.full_name.lower() or needle in u.role.value
        ]

    def search_reviews(self, text: str) -> list[Review]:
        """Match reviews by title, author or reviewer name, case-insensitively."""
        needle = text.strip().lower()
        if not needle:
            return list(self.reviews)
        return [
            r for r in self.reviews
            if needle in r.book_title.lower()
            or needle in r.author.lower()
            or needle in (r.user_name or "").lower()
        ]

    def stats(self) -> DashboardStats:
        archived = sum(1 for r in self.reviews if r.is_archived)
        return DashboardStats(
            total_users=len(self.users),
            active_reviews=len(self.reviews) - archived,
            archived_reviews=archived,
        )
