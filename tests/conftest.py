"""
Shared fixtures: an in-process fake Yushan backend served through
httpx.MockTransport, so concurrency tests can hold the refresh call open
until every request has queued behind it.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Set

import httpx
import pytest

from yushan_client import ClientConfig, RateBudget, YushanClient


BASE_URL = "http://yushan.test/api"


class FakeBackend:
    """
    Minimal backend.

    - ``POST /api/auth/refresh`` answers from ``refresh_results`` (one per
      call); it blocks while ``hold_refresh`` is in effect.
    - ``public_paths`` always answer 200.
    - Every other path answers 200 for a bearer token in ``valid_tokens``
      and 401 otherwise.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.refresh_requests: List[httpx.Request] = []
        self.valid_tokens: Set[str] = set()
        self.public_paths: Set[str] = set()
        self.refresh_results: List[httpx.Response] = []
        self.refresh_gate: Optional[asyncio.Event] = None
        self.errors: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def hold_refresh(self) -> None:
        self.refresh_gate = asyncio.Event()

    def release_refresh(self) -> None:
        if self.refresh_gate is not None:
            self.refresh_gate.set()

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/auth/refresh":
            self.refresh_requests.append(request)
            if self.refresh_gate is not None:
                await self.refresh_gate.wait()
            return self.refresh_results.pop(0)

        self.requests.append(request)
        if path in self.errors:
            return self.errors[path](request)
        if path in self.public_paths:
            return httpx.Response(200, json={"data": {"path": path}})

        auth = request.headers.get("Authorization", "")
        token = auth[len("Bearer "):] if auth.startswith("Bearer ") else None
        if token in self.valid_tokens:
            return httpx.Response(200, json={"data": {"path": path, "token": token}})
        return httpx.Response(401, json={"message": "Token expired"})


def refresh_ok(access: str, refresh: Optional[str] = None, expires_in: int = 3600000) -> httpx.Response:
    data: Dict[str, Any] = {"accessToken": access, "expiresIn": expires_in}
    if refresh:
        data["refreshToken"] = refresh
    return httpx.Response(200, json={"data": data})


def refresh_denied() -> httpx.Response:
    return httpx.Response(401, json={"message": "Refresh token revoked"})


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


async def wait_until(condition: Callable[[], bool], rounds: int = 200) -> None:
    """Yield to the event loop until ``condition`` holds."""
    for _ in range(rounds):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notices() -> List[str]:
    return []


@pytest.fixture
def redirects() -> List[str]:
    return []


@pytest.fixture
def make_client(backend: FakeBackend, notices: List[str], redirects: List[str]):
    """Factory for YushanClients wired to the fake backend."""

    def factory(**overrides: Any) -> YushanClient:
        config = ClientConfig(base_url=BASE_URL, **overrides)
        return YushanClient(
            config,
            notify=notices.append,
            redirect=redirects.append,
            transport=httpx.MockTransport(backend.handler),
        )

    return factory


@pytest.fixture
def small_budgets() -> Dict[str, RateBudget]:
    return {
        "default_budget": RateBudget(5, 60000),
        "heavy_budget": RateBudget(2, 60000),
        "light_budget": RateBudget(10, 60000),
    }
