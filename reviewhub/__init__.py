"""
ReviewHub - Book Review Platform Client.

Session management and role-gated API access for the review platform.
"""

from .client import ReviewHubClient, create_client
from .config import Settings, get_settings
from .errors import (
    ErrorCode,
    Result,
    ReviewHubError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ServerValidationError,
    ServerError,
    TransportError,
    StorageError,
)
from .models import (
    Genre,
    Role,
    User,
    Review,
    ReviewDraft,
    ReviewFilter,
    Registration,
    Session,
    SessionState,
)
from .api_client import ApiClient
from .session import SessionManager
from .gateway import ReviewGateway
from .storage import SessionStorage, MemoryStorage, JsonFileStorage
from .dashboards import UserDashboard, MyReviews, AdminDashboard, DashboardStats
from .log import setup_logging, redact

__version__ = "0.1.0"

__all__ = [
    # Wiring
    "ReviewHubClient",
    "create_client",
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "Result",
    "ReviewHubError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ServerValidationError",
    "ServerError",
    "TransportError",
    "StorageError",
    # Models
    "Genre",
    "Role",
    "User",
    "Review",
    "ReviewDraft",
    "ReviewFilter",
    "Registration",
    "Session",
    "SessionState",
    # Components
    "ApiClient",
    "SessionManager",
    "ReviewGateway",
    "SessionStorage",
    "MemoryStorage",
    "JsonFileStorage",
    # Dashboards
    "UserDashboard",
    "MyReviews",
    "AdminDashboard",
    "DashboardStats",
    # Logging
    "setup_logging",
    "redact",
]
