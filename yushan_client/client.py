"""
Yushan Client

Authenticated, rate-limited HTTP access to the Yushan backend. A
YushanClient owns the credential store, the refresh coordinator and one
shared httpx transport, and exposes three independently budgeted
ApiClient instances:

    default  general calls
    heavy    large payload operations (novel/chapter uploads)
    light    frequent small calls (search, autocomplete)

Every ApiClient request runs: rate budget -> bearer interceptor -> network
-> refresh coordinator (on 401) -> status check.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from .credentials import CredentialStore
from .errors import (
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    YushanError,
)
from .interceptors import attach_bearer_token, bearer_header
from .ratelimit import SlidingWindowLimiter
from .refresh import RefreshCoordinator, TokenRefresher
from .services import (
    AuthService,
    ChapterService,
    CommentService,
    LibraryService,
    NovelService,
    ReviewService,
    SearchService,
    UserService,
)
from .session import SessionExpiredHandler
from .types import ClientConfig, RateBudget, RequestDescriptor


logger = logging.getLogger("yushan_client")


class ApiClient:
    """
    One traffic class of the access layer.

    Shares the credential store, coordinator and transport with its siblings
    but owns its rate budget.
    """

    def __init__(
        self,
        name: str,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        limiter: SlidingWindowLimiter,
        wait_for_budget: bool = False,
        headers: Optional[Dict[str, str]] = None,
        debug: bool = False,
    ) -> None:
        self.name = name
        self._http_client = http_client
        self._store = store
        self._coordinator = coordinator
        self._limiter = limiter
        self._wait_for_budget = wait_for_budget
        self._default_headers = {"Accept": "application/json", **(headers or {})}
        self._debug = debug

    @property
    def limiter(self) -> SlidingWindowLimiter:
        return self._limiter

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[{self.name}] {message}", *args)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        skip_auth_refresh: bool = False,
    ) -> httpx.Response:
        """
        Issue a request and return the successful response.

        Raises a YushanError subclass for any failure. A first 401 is
        recovered through the refresh coordinator unless
        ``skip_auth_refresh`` is set.
        """
        descriptor = RequestDescriptor(
            method=method.upper(),
            url=path,
            params=params,
            json=json,
            headers={**self._default_headers, **(headers or {})},
        )

        try:
            await self._limiter.acquire(wait=self._wait_for_budget)
            self._log("%s %s", descriptor.method, descriptor.url)
            response = await self._send(descriptor)
            if not skip_auth_refresh:
                response = await self._coordinator.recover(descriptor, response, self._replay)
            return self._check(response)
        except RequestTimeoutError:
            logger.error("%s: request timeout - %s %s", self.name, descriptor.method, descriptor.url)
            raise
        except RateLimitError as e:
            logger.warning(
                "%s: rate limit exceeded (%s) - %s %s",
                self.name,
                "client budget" if e.client_side else "server",
                descriptor.method,
                descriptor.url,
            )
            raise

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    async def _send(self, descriptor: RequestDescriptor) -> httpx.Response:
        headers = attach_bearer_token(dict(descriptor.headers), self._store)
        return await self._transmit(descriptor, headers)

    async def _replay(self, descriptor: RequestDescriptor, token: str) -> httpx.Response:
        # Raw transport only: no budget, no interceptor, no coordinator.
        headers = dict(descriptor.headers)
        headers["Authorization"] = bearer_header(token)
        self._log("replaying %s %s with refreshed token", descriptor.method, descriptor.url)
        return await self._transmit(descriptor, headers)

    async def _transmit(self, descriptor: RequestDescriptor, headers: Dict[str, str]) -> httpx.Response:
        request = descriptor.build(self._http_client, headers)
        try:
            return await self._http_client.send(request)
        except httpx.TimeoutException:
            raise RequestTimeoutError("Request timeout", {"url": str(request.url)})
        except httpx.RequestError as e:
            raise NetworkError(str(e) or "Network error", {"url": str(request.url)})

    def _check(self, response: httpx.Response) -> httpx.Response:
        """Return successful responses; raise the matching error otherwise."""
        if response.is_success:
            return response

        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        error = YushanError.from_response(payload, response.status_code)
        if isinstance(error, RateLimitError):
            retry_after = response.headers.get("retry-after")
            if retry_after and retry_after.isdigit():
                error.retry_after = int(retry_after)
                error.details["retry_after"] = error.retry_after
        raise error


class YushanClient:
    """
    Yushan Client - SDK entry point.

    Owns the shared access-layer state; construct one per application (or
    per test) and close it with ``aclose`` or ``async with``.

    Args:
        config: Client configuration (default: ClientConfig())
        notify: Shows the session-expired message to the user
        redirect: Navigates to the login view after a failed refresh
        transport: Optional httpx transport (e.g. for tests)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        notify: Optional[Callable[[str], None]] = None,
        redirect: Optional[Callable[[str], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = config or ClientConfig()
        config.validate()
        self._config = config

        self.store = CredentialStore(config.storage)
        self._http_client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
        )
        self.refresher = TokenRefresher(self._http_client, self.store, config.headers)
        self.session_handler = SessionExpiredHandler(
            self.store,
            notify=notify,
            redirect=redirect,
            login_path=config.login_path,
        )
        self.coordinator = RefreshCoordinator(
            self.store,
            self.refresher.refresh,
            on_unauthorized=self.session_handler,
        )

        self.default = self._create_client("default", config.default_budget)
        self.heavy = self._create_client("heavy", config.heavy_budget)
        self.light = self._create_client("light", config.light_budget)

        # Services
        self.auth = AuthService(self)
        self.users = UserService(self)
        self.novels = NovelService(self)
        self.chapters = ChapterService(self)
        self.reviews = ReviewService(self)
        self.search = SearchService(self)
        self.library = LibraryService(self)
        self.comments = CommentService(self)

        if config.debug:
            logger.debug("YushanClient initialized (base_url=%s)", config.base_url)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _create_client(self, name: str, budget: RateBudget) -> ApiClient:
        return ApiClient(
            name,
            self._http_client,
            self.store,
            self.coordinator,
            SlidingWindowLimiter(budget),
            wait_for_budget=self._config.wait_for_budget,
            headers=self._config.headers,
            debug=self._config.debug,
        )

    def is_authenticated(self) -> bool:
        """Check if a credential is present."""
        return self.store.is_authenticated()

    async def aclose(self) -> None:
        """Cancel any in-flight refresh and close the HTTP transport."""
        await self.coordinator.aclose()
        await self._http_client.aclose()

    async def __aenter__(self) -> "YushanClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def create_yushan_client(config: Optional[ClientConfig] = None, **kwargs: Any) -> YushanClient:
    """Create a new Yushan client."""
    return YushanClient(config, **kwargs)
