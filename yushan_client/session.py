"""
Session-expired side effect.

Runs once per terminal refresh failure: clears the credential store,
surfaces a notice to the user and sends them to the login view with an
``expired=true`` marker so that view can tell expiry from a fresh login.
"""

import logging
from typing import Callable, Optional
from urllib.parse import urlencode

from .credentials import CredentialStore


logger = logging.getLogger("yushan_client.session")

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


def _log_notice(message: str) -> None:
    logger.warning(message)


class SessionExpiredHandler:
    """
    Callable invoked by the refresh coordinator after a failed refresh.

    Args:
        store: Credential store to clear
        notify: Shows the session-expired message (default: log a warning)
        redirect: Navigates to the given login URL (default: no navigation)
        login_path: Path of the login view
    """

    def __init__(
        self,
        store: CredentialStore,
        notify: Optional[Callable[[str], None]] = None,
        redirect: Optional[Callable[[str], None]] = None,
        login_path: str = "/login",
    ) -> None:
        self._store = store
        self._notify = notify or _log_notice
        self._redirect = redirect
        self._login_path = login_path

    @property
    def login_url(self) -> str:
        separator = "&" if "?" in self._login_path else "?"
        return f"{self._login_path}{separator}{urlencode({'expired': 'true'})}"

    def __call__(self) -> None:
        self._store.clear_credential()
        self._notify(SESSION_EXPIRED_MESSAGE)
        if self._redirect is not None:
            self._redirect(self.login_url)
