"""
Shared plumbing for the domain service wrappers.

Wrappers never retry or coordinate anything themselves; they issue one call
through an ApiClient and turn any YushanError into a ServiceError whose
message is fit to show a user.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from ..errors import (
    NetworkError,
    RateLimitError,
    ServiceError,
    TokenRefreshError,
    YushanError,
    server_message,
)
from ..types import ApiEnvelope

if TYPE_CHECKING:
    from ..client import ApiClient, YushanClient


NETWORK_MESSAGE = "Network error. Please check your internet connection"
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again"
SERVER_ERROR_MESSAGE = "Server error. Please try again later"
RATE_LIMIT_MESSAGE = "Too many requests. Please wait before trying again"


def translate_error(
    error: YushanError,
    default: str,
    messages: Optional[Dict[int, str]] = None,
) -> ServiceError:
    """
    Map an access-layer error to a user-facing ServiceError.

    Server-supplied text wins over ``messages[status]``, which wins over
    ``default``. 401 and 5xx use fixed messages; passing a 401 entry in
    ``messages`` (e.g. for login) makes 401 behave like any other status.
    """
    messages = messages or {}
    status = error.status_code

    if isinstance(error, ServiceError):
        return error
    if isinstance(error, NetworkError):
        return ServiceError(NETWORK_MESSAGE, 0, {"code": error.code})
    if isinstance(error, TokenRefreshError):
        return ServiceError(SESSION_EXPIRED_MESSAGE, 401, {"code": error.code})
    if isinstance(error, RateLimitError):
        return ServiceError(messages.get(429, RATE_LIMIT_MESSAGE), 429, {"retry_after": error.retry_after})

    details = {"code": error.code}
    if status == 401 and 401 not in messages:
        return ServiceError(SESSION_EXPIRED_MESSAGE, status, details)
    if 500 <= status < 600:
        return ServiceError(SERVER_ERROR_MESSAGE, status, details)

    message = server_message(error.details.get("payload")) or messages.get(status) or default
    return ServiceError(message, status, details)


class BaseService:
    """Base class holding the owning YushanClient."""

    def __init__(self, client: "YushanClient") -> None:
        self._client = client

    async def _call(
        self,
        api: "ApiClient",
        method: str,
        path: str,
        default: str,
        messages: Optional[Dict[int, str]] = None,
        **kwargs: Any,
    ) -> ApiEnvelope:
        try:
            response = await api.request(method, path, **kwargs)
        except YushanError as e:
            raise translate_error(e, default, messages) from e
        return ApiEnvelope.from_response(response)
