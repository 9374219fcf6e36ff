"""
Yushan Client Type Definitions

Configuration, credential and request descriptors, plus the explicit
response envelope types returned by the backend.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar, runtime_checkable
from urllib.parse import urlparse

import httpx

from .errors import ConfigurationError, ServiceError


T = TypeVar("T")

DEFAULT_BASE_URL = "http://localhost:8080/api"


@dataclass
class Credential:
    """Access/refresh token pair with an absolute expiry in epoch milliseconds."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expiry_timestamp_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expiry_timestamp_ms": self.expiry_timestamp_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        return cls(
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            expiry_timestamp_ms=data.get("expiry_timestamp_ms"),
        )


@runtime_checkable
class TokenStorage(Protocol):
    """Persistence backend for the credential store."""

    def load(self) -> Credential:
        """Return the persisted credential (empty when nothing is stored)."""
        ...

    def save(self, credential: Credential) -> None:
        """Persist the credential, replacing what was stored."""
        ...

    def clear(self) -> None:
        """Erase the persisted credential."""
        ...


@dataclass
class RateBudget:
    """Maximum number of requests allowed within a rolling window."""

    max_requests: int
    window_ms: int

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000.0


@dataclass
class ClientConfig:
    """Client configuration options."""

    # Backend base URL, including the /api prefix
    base_url: str = DEFAULT_BASE_URL
    # Request timeout in seconds (default: 10)
    timeout: float = 10.0
    # General calls: 60 requests per minute
    default_budget: RateBudget = field(default_factory=lambda: RateBudget(60, 60000))
    # Large payload operations (uploads, chapter batches): 10 per minute
    heavy_budget: RateBudget = field(default_factory=lambda: RateBudget(10, 60000))
    # Frequent small calls (search, autocomplete): 120 per minute
    light_budget: RateBudget = field(default_factory=lambda: RateBudget(120, 60000))
    # Sleep until the window frees a slot instead of failing fast
    wait_for_budget: bool = False
    # Credential persistence (default: None, uses MemoryStorage)
    storage: Optional[TokenStorage] = None
    # Custom headers to include in requests
    headers: Optional[Dict[str, str]] = None
    # Where the session-expired redirect points
    login_path: str = "/login"
    # Enable debug logging (default: False)
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from YUSHAN_API_URL / YUSHAN_TIMEOUT, then apply overrides."""
        values: Dict[str, Any] = {}
        base_url = os.environ.get("YUSHAN_API_URL", "").strip()
        if base_url:
            values["base_url"] = base_url
        timeout = os.environ.get("YUSHAN_TIMEOUT", "").strip()
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigurationError(f"Invalid YUSHAN_TIMEOUT: {timeout!r}")
        values.update(overrides)
        return cls(**values)

    def validate(self) -> None:
        """Raise ConfigurationError when the configuration cannot work."""
        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                "base_url must be an absolute http(s) URL",
                {"base_url": self.base_url},
            )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", {"timeout": self.timeout})
        for name in ("default_budget", "heavy_budget", "light_budget"):
            budget: RateBudget = getattr(self, name)
            if budget.max_requests <= 0 or budget.window_ms <= 0:
                raise ConfigurationError(f"{name} must have positive limits")


@dataclass
class RequestDescriptor:
    """
    Configuration of one outbound call.

    ``retried`` is a one-shot flag: it is set before the request is replayed
    after a credential refresh, and a request carrying it is never recovered
    again.
    """

    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    retried: bool = False

    def build(self, client: httpx.AsyncClient, headers: Optional[Dict[str, str]] = None) -> httpx.Request:
        """Build a fresh httpx request; ``headers`` replaces the descriptor's own."""
        return client.build_request(
            self.method,
            self.url,
            params=_drop_none(self.params),
            json=self.json,
            headers=self.headers if headers is None else headers,
        )


def _drop_none(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None and value != ""}


def _payload(data: Any, kind: str) -> Dict[str, Any]:
    """Envelope payloads must be JSON objects; ``None`` reads as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ServiceError(
            f"Malformed {kind} response from server",
            details={"payload_type": type(data).__name__},
        )
    return data


# =============================================================================
# Response envelopes
# =============================================================================

@dataclass
class ApiEnvelope:
    """
    Standard backend envelope: ``{"code": ..., "message": ..., "data": ...}``.

    Every Yushan endpoint wraps its payload this way; the services read
    ``data`` and never guess at other nesting.
    """

    data: Any = None
    code: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, body: Any) -> "ApiEnvelope":
        if not isinstance(body, dict):
            return cls(data=None)
        return cls(
            data=body.get("data"),
            code=body.get("code"),
            message=body.get("message"),
        )

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiEnvelope":
        if not response.content:
            return cls(data=None)
        try:
            body = response.json()
        except ValueError:
            return cls(data=None)
        return cls.from_dict(body)


@dataclass
class Page(Generic[T]):
    """Paged payload: ``{"content": [...], "totalElements": n, ...}``."""

    content: List[T] = field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page: int = 0
    size: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Page[Any]":
        data = _payload(data, "page")
        content = data.get("content") or []
        return cls(
            content=content,
            total_elements=data.get("totalElements", len(content)),
            total_pages=data.get("totalPages", 0),
            page=data.get("currentPage", data.get("page", 0)),
            size=data.get("size", len(content)),
        )


@dataclass
class TokenResult:
    """Tokens returned by login and refresh. ``expires_in`` is milliseconds."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenResult":
        data = _payload(data, "token")
        return cls(
            access_token=data.get("accessToken", ""),
            refresh_token=data.get("refreshToken"),
            expires_in=data.get("expiresIn"),
        )


@dataclass
class User:
    """User data returned by the auth and user endpoints."""

    uuid: str
    username: str
    email: str
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    is_author: bool = False
    level: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("uuid", "username", "email", "avatarUrl", "gender", "isAuthor", "level")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        data = _payload(data, "user")
        return cls(
            uuid=data.get("uuid", ""),
            username=data.get("username", ""),
            email=data.get("email", ""),
            avatar_url=data.get("avatarUrl"),
            gender=data.get("gender"),
            is_author=bool(data.get("isAuthor", False)),
            level=data.get("level", 0) or 0,
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )


@dataclass
class AuthResult:
    """Login/registration result: tokens plus the user fields."""

    user: User
    tokens: TokenResult

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthResult":
        data = _payload(data, "authentication")
        user_data = {
            k: v for k, v in data.items()
            if k not in ("accessToken", "refreshToken", "expiresIn", "tokenType")
        }
        return cls(user=User.from_dict(user_data), tokens=TokenResult.from_dict(data))


@dataclass
class RegistrationData:
    """User registration form data."""

    username: str
    email: str
    password: str
    gender: str
    birthday: Any
    otp: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the payload the register endpoint expects."""
        gender_value = {"male": "MALE", "female": "FEMALE"}.get((self.gender or "").lower(), "UNKNOWN")
        birthday = self.birthday
        if hasattr(birthday, "strftime"):
            birthday = birthday.strftime("%Y-%m-%d")
        return {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "gender": gender_value,
            "birthday": birthday,
            "code": self.otp,
        }


@dataclass
class SearchResult:
    """Combined search result across novels and chapters."""

    novels: List[Dict[str, Any]] = field(default_factory=list)
    novel_count: int = 0
    chapters: List[Dict[str, Any]] = field(default_factory=list)
    chapter_count: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SearchResult":
        data = _payload(data, "search")
        return cls(
            novels=data.get("novels") or [],
            novel_count=data.get("novelCount", 0) or 0,
            chapters=data.get("chapters") or [],
            chapter_count=data.get("chapterCount", 0) or 0,
        )
