"""
Yushan Client
yushan-client

Async access layer for the Yushan novel platform: bearer credentials on
every call, single-flight token refresh with replay of the failed requests,
and independently rate-budgeted default/heavy/light clients.
"""

from .client import ApiClient, YushanClient, create_yushan_client
from .credentials import CredentialStore
from .interceptors import attach_bearer_token
from .ratelimit import SlidingWindowLimiter
from .refresh import RefreshCoordinator, RefreshState, TokenRefresher
from .session import SESSION_EXPIRED_MESSAGE, SessionExpiredHandler
from .types import (
    ClientConfig,
    Credential,
    TokenStorage,
    RateBudget,
    RequestDescriptor,
    ApiEnvelope,
    Page,
    TokenResult,
    User,
    AuthResult,
    RegistrationData,
    SearchResult,
)
from .errors import (
    YushanError,
    NetworkError,
    RequestTimeoutError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    UnprocessableError,
    RateLimitError,
    ServerError,
    TokenRefreshError,
    ConfigurationError,
    ServiceError,
    is_yushan_error,
    is_auth_failure,
)
from .storage import MemoryStorage, FileStorage

__version__ = "0.1.0"
__all__ = [
    # Clients
    "YushanClient",
    "ApiClient",
    "create_yushan_client",
    # Access layer
    "CredentialStore",
    "attach_bearer_token",
    "SlidingWindowLimiter",
    "RefreshCoordinator",
    "RefreshState",
    "TokenRefresher",
    "SessionExpiredHandler",
    "SESSION_EXPIRED_MESSAGE",
    # Types
    "ClientConfig",
    "Credential",
    "TokenStorage",
    "RateBudget",
    "RequestDescriptor",
    "ApiEnvelope",
    "Page",
    "TokenResult",
    "User",
    "AuthResult",
    "RegistrationData",
    "SearchResult",
    # Errors
    "YushanError",
    "NetworkError",
    "RequestTimeoutError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableError",
    "RateLimitError",
    "ServerError",
    "TokenRefreshError",
    "ConfigurationError",
    "ServiceError",
    "is_yushan_error",
    "is_auth_failure",
    # Storage
    "MemoryStorage",
    "FileStorage",
]
