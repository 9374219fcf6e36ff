"""
Outbound request interceptor.

Injects the bearer credential into a request's headers. Pure header
mutation: it never blocks and never rejects a request.
"""

from typing import MutableMapping

from .credentials import CredentialStore


def bearer_header(token: str) -> str:
    return f"Bearer {token}"


def attach_bearer_token(
    headers: MutableMapping[str, str],
    store: CredentialStore,
) -> MutableMapping[str, str]:
    """Set ``Authorization: Bearer <token>`` when the store holds a token."""
    token = store.get_access_token()
    if token:
        headers["Authorization"] = bearer_header(token)
    return headers
