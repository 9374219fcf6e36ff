"""Authentication endpoints: login, registration, verification email, logout."""

import logging
from typing import Any, Dict, Optional

from ..errors import ServiceError, YushanError
from ..types import ApiEnvelope, AuthResult, RegistrationData, User
from ._base import BaseService, translate_error


logger = logging.getLogger("yushan_client.auth")

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
EMAIL_EXISTS_MESSAGE = "Email already exists. Please use a different email or login."


class AuthService(BaseService):
    """
    Auth operations.

    All calls skip the refresh coordinator: a 401 here means bad
    credentials, not an expired session.
    """

    def __init__(self, client: Any) -> None:
        super().__init__(client)
        self._current_user: Optional[User] = None

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Login with email and password.

        Stores the returned tokens and caches the user.

        Raises:
            ServiceError: with a readable message on any failure
        """
        envelope = await self._call(
            self._client.default,
            "POST",
            "/auth/login",
            "Login failed. Please try again",
            {
                400: INVALID_CREDENTIALS_MESSAGE,
                401: INVALID_CREDENTIALS_MESSAGE,
                403: "Account is locked or suspended",
                404: "Account not found",
            },
            json={"email": email, "password": password},
            skip_auth_refresh=True,
        )
        result = self._store_result(envelope.data)
        logger.debug("Login successful for %s", email)
        return result

    async def register(self, data: RegistrationData) -> AuthResult:
        """Register a new user and sign them in."""
        if not data.gender:
            raise ServiceError("Gender is required", 400)

        try:
            response = await self._client.default.post(
                "/auth/register",
                json=data.to_dict(),
                skip_auth_refresh=True,
            )
        except YushanError as e:
            message = (e.message or "").lower()
            if e.status_code in (400, 409, 422) and "email already" in message:
                raise ServiceError(EMAIL_EXISTS_MESSAGE, e.status_code) from e
            raise translate_error(
                e,
                "Registration failed. Please try again",
                {
                    400: "Invalid registration data. Please check all fields",
                    409: "Email already registered",
                    422: "Invalid verification code or code expired",
                },
            ) from e

        return self._store_result(ApiEnvelope.from_response(response).data)

    async def send_verification_email(self, email: str) -> Any:
        """Send the registration OTP to ``email``."""
        envelope = await self._call(
            self._client.default,
            "POST",
            "/auth/send-email",
            "Failed to send verification email",
            {
                400: "Invalid email address",
                409: "Email already registered",
            },
            json={"email": email},
            skip_auth_refresh=True,
        )
        return envelope.data

    async def logout(self) -> None:
        """Revoke the refresh token server-side, then always clear the session."""
        refresh_token = self._client.store.get_refresh_token()
        try:
            if refresh_token:
                await self._client.default.post(
                    "/auth/logout",
                    json={"refreshToken": refresh_token},
                    skip_auth_refresh=True,
                )
        except YushanError as e:
            logger.debug("Ignoring logout error: %s", e)
        finally:
            self._client.store.clear_credential()
            self._current_user = None

    async def refresh_token(self) -> str:
        """Refresh the access token now, sharing any refresh already in flight."""
        return await self._client.coordinator.refresh()

    def get_user(self) -> Optional[User]:
        """Get the user cached by the last login/registration."""
        return self._current_user

    def _store_result(self, data: Optional[Dict[str, Any]]) -> AuthResult:
        result = AuthResult.from_dict(data or {})
        if not result.tokens.access_token:
            raise ServiceError("Authentication response did not contain an access token", 0)
        self._client.store.set_credential(
            result.tokens.access_token,
            result.tokens.refresh_token,
            result.tokens.expires_in,
        )
        self._current_user = result.user
        return result

