"""
Data models for the ReviewHub client.

Pydantic models for data exchanged with the backend:
- Users and roles
- Reviews, review drafts and list filters
- Authentication payloads
- The client-held session snapshot

Server payloads are parsed leniently (unknown fields ignored); drafts and
credentials carry the client-side validation rules and report the first
failing rule as a single message.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from reviewhub.errors import ValidationError


MIN_REVIEW_TEXT_LENGTH = 10
MIN_RATING = 1
MAX_RATING = 5
PIN_LENGTH = 4


# =============================================================================
# Enums
# =============================================================================

class Role(str, Enum):
    """Authorization role."""
    USER = "user"
    ADMIN = "admin"


class Genre(str, Enum):
    """Fixed set of review genres."""
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCIENCE_FICTION = "Science Fiction"
    FANTASY = "Fantasy"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    YOUNG_ADULT = "Young Adult"


class SessionState(str, Enum):
    """Lifecycle of the client session."""
    UNINITIALIZED = "uninitialized"
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


# =============================================================================
# Server Resources
# =============================================================================

class User(BaseModel):
    """User snapshot as returned by the backend."""

    id: int
    full_name: str
    role: Role = Role.USER
    created_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Review(BaseModel):
    """Book review as returned by the backend."""

    id: int
    book_title: str
    author: str
    genre: Genre
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    review_text: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_archived: bool = False

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# Requests
# =============================================================================

def first_error_message(exc: PydanticValidationError) -> tuple[str, Optional[str]]:
    """
    Reduce a pydantic error to one user-facing message.

    Returns:
        (message, field name or None)
    """
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error.get("loc") else None
    if error.get("type") == "value_error":
        message = str(error["ctx"]["error"]) if "ctx" in error else error["msg"]
    else:
        message = f"{field}: {error['msg']}" if field else error["msg"]
    return message, field


class ReviewDraft(BaseModel):
    """
    Review create/update payload.

    The rules mirror the backend's; checking them here only spares a
    round trip, the backend validates again.
    """

    book_title: str
    author: str
    genre: Genre
    rating: int = Field(..., strict=True)
    review_text: str

    @field_validator("book_title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please enter book title")
        return value

    @field_validator("author")
    @classmethod
    def _author_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please enter author name")
        return value

    @field_validator("genre", mode="before")
    @classmethod
    def _genre_known(cls, value: Any) -> Any:
        allowed = {genre.value for genre in Genre}
        if isinstance(value, Genre) or (isinstance(value, str) and value in allowed):
            return value
        raise ValueError("Please select a genre")

    @field_validator("rating")
    @classmethod
    def _rating_in_range(cls, value: int) -> int:
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        return value

    @field_validator("review_text")
    @classmethod
    def _text_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_REVIEW_TEXT_LENGTH:
            raise ValueError(
                f"Review text should be at least {MIN_REVIEW_TEXT_LENGTH} characters"
            )
        return value

    @classmethod
    def parse(cls, data: "ReviewDraft | dict") -> "ReviewDraft":
        """
        Build a validated draft.

        Raises:
            ValidationError: If any rule fails.
        """
        if isinstance(data, ReviewDraft):
            data = data.model_dump()
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            message, field = first_error_message(e)
            raise ValidationError(message, field=field) from e

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")


class ReviewFilter(BaseModel):
    """Server-side listing filter; absent fields are not sent."""

    search: Optional[str] = None
    genre: Optional[Genre] = None
    rating: Optional[int] = Field(None, ge=MIN_RATING, le=MAX_RATING)

    @classmethod
    def parse(cls, data: "ReviewFilter | dict") -> "ReviewFilter":
        """
        Build a filter from a model or a plain mapping.

        Raises:
            ValidationError: On an unknown genre or out-of-range rating.
        """
        if isinstance(data, ReviewFilter):
            return data
        try:
            return cls.model_validate({k: v for k, v in data.items() if v not in (None, "")})
        except PydanticValidationError as e:
            message, field = first_error_message(e)
            raise ValidationError(message, field=field) from e

    def to_params(self) -> dict[str, str]:
        params = {}
        if self.search:
            params["search"] = self.search
        if self.genre:
            params["genre"] = self.genre.value
        if self.rating:
            params["rating"] = str(self.rating)
        return params


class Credentials(BaseModel):
    """Login form values."""

    full_name: str
    pin_code: str

    @field_validator("full_name", "pin_code")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please enter both name and PIN")
        return value

    @classmethod
    def parse(cls, full_name: str, pin_code: str, require_pin_format: bool = True) -> "Credentials":
        """
        Validate login input.

        Args:
            full_name: Registered full name
            pin_code: PIN issued at registration
            require_pin_format: Enforce the 4-digit PIN shape (user login only)

        Raises:
            ValidationError: If a field is blank or the PIN is malformed.
        """
        try:
            credentials = cls(full_name=full_name, pin_code=pin_code)
        except PydanticValidationError as e:
            message, field = first_error_message(e)
            raise ValidationError(message, field=field) from e

        if require_pin_format and len(credentials.pin_code) != PIN_LENGTH:
            raise ValidationError(f"PIN must be {PIN_LENGTH} digits", field="pin_code")
        return credentials


# =============================================================================
# Auth Payloads
# =============================================================================

class AuthResponse(BaseModel):
    """Login response."""

    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
    user: User

    model_config = ConfigDict(extra="ignore")


class Registration(BaseModel):
    """Registration response carrying the freshly issued PIN."""

    pin: str
    full_name: Optional[str] = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Session
# =============================================================================

class Session(BaseModel):
    """
    Immutable snapshot of the client session.

    Token and user are both set or both unset.
    """

    token: Optional[str] = None
    user: Optional[User] = None
    loading: bool = False

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _complete_or_empty(self) -> "Session":
        if (self.token is None) != (self.user is None):
            raise ValueError("token and user must be set together")
        return self

    @classmethod
    def uninitialized(cls) -> "Session":
        return cls(loading=True)

    @classmethod
    def empty(cls) -> "Session":
        return cls()

    @property
    def state(self) -> SessionState:
        if self.loading:
            return SessionState.UNINITIALIZED
        if self.token is None:
            return SessionState.LOGGED_OUT
        return SessionState.LOGGED_IN

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin
