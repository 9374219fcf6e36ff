"""User profile and author-upgrade endpoints."""

from typing import Any, Dict

from ..types import User
from ._base import BaseService


class UserService(BaseService):

    async def get_me(self) -> User:
        """Fetch the signed-in user."""
        envelope = await self._call(
            self._client.default,
            "GET",
            "/users/me",
            "Failed to fetch user info",
            {404: "User not found"},
        )
        return User.from_dict(envelope.data or {})

    async def get_user(self, user_id: str) -> User:
        envelope = await self._call(
            self._client.default,
            "GET",
            f"/users/{user_id}",
            "Failed to fetch user",
            {404: "User not found"},
        )
        return User.from_dict(envelope.data or {})

    async def update_profile(self, user_id: str, data: Dict[str, Any]) -> User:
        envelope = await self._call(
            self._client.default,
            "PUT",
            f"/users/{user_id}/profile",
            "Failed to update profile",
            {400: "Invalid profile data", 404: "User not found", 409: "Username or email already in use"},
            json=data,
        )
        return User.from_dict(envelope.data or {})

    async def send_author_verification_email(self, email: str) -> Any:
        envelope = await self._call(
            self._client.default,
            "POST",
            "/author/send-email-author-verification",
            "Failed to send author verification email",
            {400: "Invalid email address", 409: "Email already in use"},
            json={"email": email},
        )
        return envelope.data

    async def upgrade_to_author(self, verification_code: str) -> Any:
        envelope = await self._call(
            self._client.default,
            "POST",
            "/author/upgrade-to-author",
            "Failed to upgrade to author",
            {400: "Invalid verification code", 409: "Verification code expired or invalid"},
            json={"verificationCode": verification_code},
        )
        return envelope.data
