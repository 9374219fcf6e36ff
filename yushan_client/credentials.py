"""
Yushan Client Credential Store

Single owner of the access/refresh token pair and its expiry. The store is
read by the request interceptor and the token refresher, and written only
by login/logout and the refresh coordinator.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from .storage import MemoryStorage
from .types import Credential, TokenStorage


logger = logging.getLogger("yushan_client.credentials")

AuthStateListener = Callable[[bool], None]


class CredentialStore:
    """
    Credential store with authentication-state notifications.

    Every mutation is one lock-guarded step with no suspension inside, so a
    concurrent reader never observes a half-written credential. Listeners
    receive the new authenticated state whenever it flips.
    """

    def __init__(
        self,
        storage: Optional[TokenStorage] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage if storage is not None else MemoryStorage()
        self._clock = clock
        self._lock = threading.RLock()
        self._listeners: List[AuthStateListener] = []

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_credential(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_in_ms: Optional[int] = None,
    ) -> None:
        """
        Store a new access token.

        The refresh token and expiry are only replaced when given. The expiry
        is computed here, at the moment the token is stored.
        """
        if not access_token:
            raise ValueError("access_token must be a non-empty string")

        with self._lock:
            was_authenticated = self.is_authenticated()
            credential = self._storage.load()
            credential.access_token = access_token
            if refresh_token:
                credential.refresh_token = refresh_token
            if expires_in_ms:
                credential.expiry_timestamp_ms = self._now_ms() + int(expires_in_ms)
            self._storage.save(credential)

        if not was_authenticated:
            self._notify(True)

    def clear_credential(self) -> None:
        """Erase all credential fields. Safe to call when already cleared."""
        with self._lock:
            was_authenticated = self.is_authenticated()
            self._storage.clear()

        if was_authenticated:
            self._notify(False)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_credential(self) -> Credential:
        with self._lock:
            return self._storage.load()

    def get_access_token(self) -> Optional[str]:
        return self.get_credential().access_token

    def get_refresh_token(self) -> Optional[str]:
        return self.get_credential().refresh_token

    def get_expiry(self) -> Optional[int]:
        """Absolute expiry in epoch milliseconds, or None when unknown."""
        return self.get_credential().expiry_timestamp_ms

    def is_expired(self) -> bool:
        """True once the recorded expiry has passed; no expiry means valid."""
        expiry = self.get_expiry()
        if not expiry:
            return False
        return self._now_ms() > expiry

    def is_authenticated(self) -> bool:
        """True iff an access token is present (expiry is not checked)."""
        return bool(self.get_access_token())

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: AuthStateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AuthStateListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self, authenticated: bool) -> None:
        logger.debug("Authentication state changed: authenticated=%s", authenticated)
        for listener in list(self._listeners):
            try:
                listener(authenticated)
            except Exception:
                logger.exception("Auth state listener %r failed", listener)
