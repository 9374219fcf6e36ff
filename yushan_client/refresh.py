"""
Yushan Client Token Refresh

TokenRefresher performs the refresh network call. RefreshCoordinator is the
response hook that turns a first-time 401 into a single shared refresh and a
replay of the failed request.

Coordinator states:

    IDLE --(first 401)--> REFRESHING --(refresh settles, queue drained)--> IDLE

All requests that hit a 401 while a refresh is outstanding wait on futures
in the coordinator's queue; the queue is drained exactly once, either with
the new access token or with the refresh error.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .credentials import CredentialStore
from .errors import TokenRefreshError, server_message
from .types import ApiEnvelope, RequestDescriptor, TokenResult


logger = logging.getLogger("yushan_client.refresh")

REFRESH_PATH = "/auth/refresh"

Replay = Callable[[RequestDescriptor, str], Awaitable[httpx.Response]]


class TokenRefresher:
    """
    Calls ``POST /auth/refresh`` with the stored refresh token.

    The call goes straight to the raw HTTP client so a failing refresh can
    never re-enter the coordinator.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self._http_client = http_client
        self._store = store
        self._headers = {"Content-Type": "application/json", **(headers or {})}

    async def refresh(self) -> TokenResult:
        refresh_token = self._store.get_refresh_token()
        if not refresh_token:
            raise TokenRefreshError("No refresh token available")

        try:
            response = await self._http_client.post(
                REFRESH_PATH,
                json={"refreshToken": refresh_token},
                headers=self._headers,
            )
        except httpx.TimeoutException:
            raise TokenRefreshError("Token refresh timed out")
        except httpx.RequestError as e:
            raise TokenRefreshError(str(e) or "Network error during token refresh")

        if not response.is_success:
            payload: Any = None
            try:
                payload = response.json()
            except ValueError:
                pass
            raise TokenRefreshError(
                server_message(payload) or f"Token refresh failed with HTTP {response.status_code}",
                {"status_code": response.status_code},
            )

        data = ApiEnvelope.from_response(response).data
        if not isinstance(data, dict):
            raise TokenRefreshError("Malformed refresh response from server")
        tokens = TokenResult.from_dict(data)
        if not tokens.access_token:
            raise TokenRefreshError("Refresh response did not contain an access token")
        return tokens


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


class RefreshCoordinator:
    """
    Single-flight credential refresh shared by every client of one YushanClient.

    Args:
        store: Credential store updated on success and cleared on failure
        refresh: Coroutine function performing the refresh network call
        on_unauthorized: Side effect fired once per failed refresh
    """

    def __init__(
        self,
        store: CredentialStore,
        refresh: Callable[[], Awaitable[TokenResult]],
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> None:
        self._store = store
        self._refresh = refresh
        self._on_unauthorized = on_unauthorized
        self._state = RefreshState.IDLE
        self._waiters: List["asyncio.Future[str]"] = []
        self._refresh_task: Optional["asyncio.Task[None]"] = None
        self._session_expired = False
        self.refresh_count = 0
        store.add_listener(self._on_auth_state_change)

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of requests suspended behind the in-flight refresh."""
        return len(self._waiters)

    async def recover(
        self,
        descriptor: RequestDescriptor,
        response: httpx.Response,
        replay: Replay,
    ) -> httpx.Response:
        """
        Response hook.

        Anything but a 401, and any 401 on an already-retried request, is
        returned unchanged. Otherwise the request waits for a fresh token and
        is replayed once through ``replay``, which must bypass this hook.
        Raises the refresh error if the refresh fails.
        """
        if response.status_code != 401 or descriptor.retried:
            return response

        descriptor.retried = True
        token = await self._wait_for_token(f"401 on {descriptor.method} {descriptor.url}")
        return await replay(descriptor, token)

    async def refresh(self) -> str:
        """Start or join the shared refresh and return the new access token."""
        return await self._wait_for_token("explicit refresh")

    def _on_auth_state_change(self, authenticated: bool) -> None:
        if authenticated:
            self._session_expired = False

    async def _wait_for_token(self, reason: str) -> str:
        if (
            self._state is RefreshState.IDLE
            and self._session_expired
            and not self._store.is_authenticated()
        ):
            # Late 401 from a request sent before the session ended; the
            # session-expired side effect has already run.
            logger.debug("%s: session already expired", reason)
            raise TokenRefreshError("Session expired")

        loop = asyncio.get_running_loop()
        waiter: "asyncio.Future[str]" = loop.create_future()
        self._waiters.append(waiter)

        if self._state is RefreshState.IDLE:
            self._state = RefreshState.REFRESHING
            logger.debug("%s: starting token refresh", reason)
            self._refresh_task = loop.create_task(self._run_refresh())
        else:
            logger.debug("%s: queued behind in-flight refresh (%d waiting)", reason, len(self._waiters))

        return await waiter

    async def _run_refresh(self) -> None:
        self.refresh_count += 1
        try:
            tokens = await self._refresh()
            # A credential that cannot be persisted fails the refresh.
            self._store.set_credential(tokens.access_token, tokens.refresh_token, tokens.expires_in)
        except asyncio.CancelledError:
            self._settle(error=TokenRefreshError("Token refresh cancelled"))
            raise
        except Exception as error:
            logger.warning("Token refresh failed: %s", error)
            self._session_expired = True
            try:
                self._store.clear_credential()
            except Exception:
                logger.exception("Failed to clear credentials after refresh failure")
            self._settle(error=error)
            self._fire_unauthorized()
            return

        logger.info("Token refreshed; resuming %d request(s)", len(self._waiters))
        self._settle(token=tokens.access_token)

    def _settle(self, token: Optional[str] = None, error: Optional[BaseException] = None) -> None:
        # Drain and go IDLE in one step so a 401 arriving during the replays
        # starts a new refresh instead of joining a finished one.
        waiters, self._waiters = self._waiters, []
        self._state = RefreshState.IDLE
        self._refresh_task = None

        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)

    def _fire_unauthorized(self) -> None:
        if self._on_unauthorized is None:
            return
        try:
            self._on_unauthorized()
        except Exception:
            logger.exception("Session-expired handler failed")

    async def aclose(self) -> None:
        """Cancel an in-flight refresh; its waiters are rejected."""
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._waiters:
            # The task was cancelled before it got to run.
            self._settle(error=TokenRefreshError("Token refresh cancelled"))
