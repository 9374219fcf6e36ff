"""
Yushan Client Error Classes

Error taxonomy for the authenticated access layer and the domain services.
HTTP failures are mapped to a subclass by status code; transport failures
(no response at all) become NetworkError.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class YushanError(Exception):
    """Base error class for the Yushan client."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    @classmethod
    def from_response(cls, payload: Optional[Dict[str, Any]], status_code: int) -> "YushanError":
        """Create the matching error subclass from an HTTP error payload."""
        message = server_message(payload) or f"HTTP {status_code}"
        details = {"payload": payload} if payload else None

        if status_code == 400:
            return ValidationError(message, details=details)
        if status_code == 401:
            return AuthenticationError(message, details=details)
        if status_code == 403:
            return AuthorizationError(message, details=details)
        if status_code == 404:
            return NotFoundError(message, details=details)
        if status_code == 409:
            return ConflictError(message, details=details)
        if status_code == 422:
            return UnprocessableError(message, details=details)
        if status_code == 429:
            return RateLimitError(message)
        if 500 <= status_code < 600:
            return ServerError(message, status_code, details=details)
        return cls("HTTP_ERROR", message, status_code, details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NetworkError(YushanError):
    """Request never reached a server (connection refused, DNS, reset)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, code: str = "NETWORK_ERROR"):
        super().__init__(code, message, 0, details)


class RequestTimeoutError(NetworkError):
    """Request timed out before a response arrived."""

    def __init__(self, message: str = "Request timeout", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="REQUEST_TIMEOUT")


class ValidationError(YushanError):
    """Bad request (400)."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 400, details)


class AuthenticationError(YushanError):
    """Authentication error (missing, invalid or expired credential)."""

    def __init__(
        self,
        message: str,
        code: str = "AUTHENTICATION_FAILED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, 401, details)


class AuthorizationError(YushanError):
    """Authorization error (insufficient permissions)."""

    def __init__(self, message: str, code: str = "FORBIDDEN", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 403, details)


class NotFoundError(YushanError):
    """Resource not found (404)."""

    def __init__(self, message: str, code: str = "NOT_FOUND", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 404, details)


class ConflictError(YushanError):
    """Conflicting state, e.g. an email that is already registered (409)."""

    def __init__(self, message: str, code: str = "CONFLICT", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 409, details)


class UnprocessableError(YushanError):
    """Semantically invalid request, e.g. an expired verification code (422)."""

    def __init__(self, message: str, code: str = "UNPROCESSABLE", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, 422, details)


class RateLimitError(YushanError):
    """
    Rate limit error.

    Raised both for a server 429 and for a request refused locally because
    the client's rate budget is exhausted (``client_side=True``).
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        client_side: bool = False,
    ):
        super().__init__(
            "RATE_LIMITED",
            message,
            429,
            {"retry_after": retry_after} if retry_after else None,
        )
        self.retry_after = retry_after
        self.client_side = client_side


class ServerError(YushanError):
    """Server-side failure (5xx)."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVER_ERROR", message, status_code, details)


class TokenRefreshError(YushanError):
    """Token refresh error. Terminal for the current session."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("TOKEN_REFRESH_FAILED", message, 401, details)


class ConfigurationError(YushanError):
    """Configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, 0, details)


class ServiceError(YushanError):
    """Human-readable failure raised by the domain service wrappers."""

    def __init__(self, message: str, status_code: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, status_code, details)


def server_message(payload: Any) -> Optional[str]:
    """Pick the server-supplied message out of an error payload, if any."""
    if not isinstance(payload, dict):
        return None
    message = payload.get("message") or payload.get("error")
    if isinstance(message, dict):
        message = message.get("message")
    return message if isinstance(message, str) and message else None


def is_yushan_error(error: Any) -> bool:
    """Check if error is a YushanError."""
    return isinstance(error, YushanError)


def is_auth_failure(error: Any) -> bool:
    """Check if error is an HTTP authorization failure (401)."""
    return isinstance(error, AuthenticationError)
