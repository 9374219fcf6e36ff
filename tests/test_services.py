"""
Tests for the domain service wrappers with mocked HTTP responses.
"""

import datetime
import json

import httpx
import pytest
import respx

from yushan_client import (
    AuthenticationError,
    ClientConfig,
    NetworkError,
    NotFoundError,
    Page,
    RateBudget,
    RateLimitError,
    RegistrationData,
    ServerError,
    ServiceError,
    TokenRefreshError,
    ValidationError,
    YushanClient,
)
from yushan_client.services import translate_error
from yushan_client.services._base import (
    NETWORK_MESSAGE,
    RATE_LIMIT_MESSAGE,
    SERVER_ERROR_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
)
from yushan_client.services.auth import EMAIL_EXISTS_MESSAGE, INVALID_CREDENTIALS_MESSAGE


API = "https://api.yushan.test/api"


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def client() -> YushanClient:
    return YushanClient(ClientConfig(base_url=API))


@pytest.fixture
def login_response() -> dict:
    return {
        "code": 200,
        "message": "Login successful",
        "data": {
            "uuid": "u-1",
            "username": "reader",
            "email": "reader@example.com",
            "avatarUrl": "https://cdn.yushan.test/a.png",
            "isAuthor": False,
            "level": 3,
            "yuan": 12,
            "accessToken": "A1",
            "refreshToken": "R1",
            "tokenType": "Bearer",
            "expiresIn": 3600000,
        },
    }


def body(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


# =============================================================================
# Error translation
# =============================================================================

class TestTranslateError:
    """Tests for translate_error."""

    def test_server_message_wins(self):
        error = NotFoundError("Novel 7 was archived", details={"payload": {"message": "Novel 7 was archived"}})
        result = translate_error(error, "Failed", {404: "Novel not found"})
        assert result.message == "Novel 7 was archived"
        assert result.status_code == 404

    def test_status_message_then_default(self):
        assert translate_error(NotFoundError("HTTP 404"), "Failed", {404: "Novel not found"}).message == "Novel not found"
        assert translate_error(ValidationError("HTTP 400"), "Failed", {404: "Novel not found"}).message == "Failed"

    def test_fixed_messages(self):
        assert translate_error(NetworkError("refused"), "Failed").message == NETWORK_MESSAGE
        assert translate_error(TokenRefreshError("revoked"), "Failed").message == SESSION_EXPIRED_MESSAGE
        assert translate_error(AuthenticationError("HTTP 401"), "Failed").message == SESSION_EXPIRED_MESSAGE
        assert translate_error(ServerError("boom", 502), "Failed").message == SERVER_ERROR_MESSAGE
        assert translate_error(RateLimitError(client_side=True), "Failed").message == RATE_LIMIT_MESSAGE

    def test_401_override(self):
        error = AuthenticationError("HTTP 401")
        assert translate_error(error, "Failed", {401: "Wrong password"}).message == "Wrong password"


# =============================================================================
# Auth
# =============================================================================

class TestAuthService:
    """Tests for AuthService."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_stores_tokens(self, client, login_response):
        route = respx.post(f"{API}/auth/login").mock(return_value=httpx.Response(200, json=login_response))

        result = await client.auth.login("reader@example.com", "secret")

        assert body(route) == {"email": "reader@example.com", "password": "secret"}
        assert result.user.username == "reader"
        assert result.user.level == 3
        assert result.user.extra == {"yuan": 12}
        assert result.tokens.access_token == "A1"
        assert client.store.get_access_token() == "A1"
        assert client.store.get_refresh_token() == "R1"
        assert client.is_authenticated()
        assert client.auth.get_user() == result.user

    @pytest.mark.asyncio
    @pytest.mark.respx(assert_all_called=False)
    async def test_login_rejected_does_not_refresh(self, client, respx_mock):
        respx_mock.post(f"{API}/auth/login").mock(return_value=httpx.Response(401))
        refresh = respx_mock.post(f"{API}/auth/refresh").mock(return_value=httpx.Response(200))
        client.store.set_credential("old", "r-old")

        with pytest.raises(ServiceError) as exc_info:
            await client.auth.login("reader@example.com", "wrong")

        assert exc_info.value.message == INVALID_CREDENTIALS_MESSAGE
        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value.__cause__, AuthenticationError)
        assert not refresh.called
        assert client.store.get_access_token() == "old"

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_prefers_server_message(self, client):
        respx.post(f"{API}/auth/login").mock(
            return_value=httpx.Response(403, json={"message": "Account suspended until Friday"})
        )

        with pytest.raises(ServiceError, match="Account suspended until Friday"):
            await client.auth.login("reader@example.com", "secret")

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_server_error(self, client):
        respx.post(f"{API}/auth/login").mock(return_value=httpx.Response(500, json={"message": "NPE"}))

        with pytest.raises(ServiceError) as exc_info:
            await client.auth.login("reader@example.com", "secret")

        assert exc_info.value.message == SERVER_ERROR_MESSAGE

    @pytest.mark.asyncio
    @respx.mock
    async def test_register_payload(self, client, login_response):
        route = respx.post(f"{API}/auth/register").mock(return_value=httpx.Response(200, json=login_response))
        data = RegistrationData(
            username="reader",
            email="reader@example.com",
            password="secret",
            gender="female",
            birthday=datetime.date(2000, 1, 2),
            otp="123456",
        )

        await client.auth.register(data)

        assert body(route) == {
            "username": "reader",
            "email": "reader@example.com",
            "password": "secret",
            "gender": "FEMALE",
            "birthday": "2000-01-02",
            "code": "123456",
        }
        assert client.store.get_access_token() == "A1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_register_requires_gender(self, client):
        data = RegistrationData("reader", "reader@example.com", "secret", "", "2000-01-02", "123456")

        with pytest.raises(ServiceError, match="Gender is required"):
            await client.auth.register(data)

    @pytest.mark.asyncio
    @respx.mock
    async def test_register_email_exists(self, client):
        respx.post(f"{API}/auth/register").mock(
            return_value=httpx.Response(409, json={"message": "Email already exists"})
        )
        data = RegistrationData("reader", "reader@example.com", "secret", "male", "2000-01-02", "123456")

        with pytest.raises(ServiceError) as exc_info:
            await client.auth.register(data)

        assert exc_info.value.message == EMAIL_EXISTS_MESSAGE
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    @respx.mock
    async def test_register_bad_code(self, client):
        respx.post(f"{API}/auth/register").mock(return_value=httpx.Response(422))
        data = RegistrationData("reader", "reader@example.com", "secret", "male", "2000-01-02", "000000")

        with pytest.raises(ServiceError, match="Invalid verification code or code expired"):
            await client.auth.register(data)

    @pytest.mark.asyncio
    @respx.mock
    async def test_logout_always_clears(self, client):
        route = respx.post(f"{API}/auth/logout").mock(return_value=httpx.Response(500))
        client.store.set_credential("A1", "R1")

        await client.auth.logout()

        assert body(route) == {"refreshToken": "R1"}
        assert not client.is_authenticated()
        assert client.auth.get_user() is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_explicit_refresh(self, client):
        route = respx.post(f"{API}/auth/refresh").mock(
            return_value=httpx.Response(200, json={"data": {"accessToken": "A2", "refreshToken": "R2"}})
        )
        client.store.set_credential("A1", "R1")

        assert await client.auth.refresh_token() == "A2"
        assert body(route) == {"refreshToken": "R1"}
        assert client.store.get_refresh_token() == "R2"

    @pytest.mark.asyncio
    @respx.mock
    async def test_login_malformed_payload(self, client):
        respx.post(f"{API}/auth/login").mock(return_value=httpx.Response(200, json={"data": ["A1"]}))

        with pytest.raises(ServiceError, match="Malformed authentication response"):
            await client.auth.login("reader@example.com", "secret")

        assert not client.is_authenticated()

    @pytest.mark.asyncio
    @respx.mock
    async def test_refresh_malformed_payload(self, client):
        respx.post(f"{API}/auth/refresh").mock(return_value=httpx.Response(200, json={"data": "ok"}))
        client.store.set_credential("A1", "R1")

        with pytest.raises(TokenRefreshError, match="Malformed refresh response"):
            await client.auth.refresh_token()

        assert not client.is_authenticated()


# =============================================================================
# Resource services
# =============================================================================

class TestResourceServices:
    """Tests for the novel, chapter, review, comment, user and library wrappers."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_novels(self, client):
        route = respx.get(f"{API}/novels").mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": {
                        "content": [{"id": 1}, {"id": 2}],
                        "totalElements": 40,
                        "totalPages": 20,
                        "currentPage": 0,
                        "size": 2,
                    }
                },
            )
        )

        page = await client.novels.list_novels(size=2)

        params = route.calls.last.request.url.params
        assert dict(params) == {"page": "0", "size": "2", "sort": "createTime", "order": "desc"}
        assert isinstance(page, Page)
        assert [n["id"] for n in page.content] == [1, 2]
        assert page.total_elements == 40
        assert page.total_pages == 20

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_novel_not_found(self, client):
        respx.get(f"{API}/novels/9").mock(return_value=httpx.Response(404))

        with pytest.raises(ServiceError) as exc_info:
            await client.novels.get_novel(9)

        assert exc_info.value.message == "Novel not found"
        assert isinstance(exc_info.value.__cause__, NotFoundError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_novel_archives(self, client):
        route = respx.post(f"{API}/novels/9/archive").mock(return_value=httpx.Response(200, json={"data": None}))

        await client.novels.delete_novel(9)

        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_chapter_list_drops_unset_params(self, client):
        route = respx.get(f"{API}/chapters/novel/3").mock(
            return_value=httpx.Response(200, json={"data": {"content": []}})
        )

        await client.chapters.list_by_novel(3, page=1)

        assert dict(route.calls.last.request.url.params) == {"page": "1"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_review_create_sends_text_twice(self, client):
        route = respx.post(f"{API}/reviews").mock(return_value=httpx.Response(200, json={"data": {"id": 5}}))

        result = await client.reviews.create(3, 4, "Great pacing")

        assert result == {"id": 5}
        assert body(route) == {
            "novelId": 3,
            "rating": 4,
            "title": "Great pacing",
            "content": "Great pacing",
            "isSpoiler": False,
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_comment_create(self, client):
        route = respx.post(f"{API}/comments").mock(return_value=httpx.Response(200, json={"data": {"id": 8}}))

        await client.comments.create(11, "Nice twist", is_spoiler=True)

        assert body(route) == {"chapterId": 11, "content": "Nice twist", "isSpoiler": True}

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_me(self, client):
        respx.get(f"{API}/users/me").mock(
            return_value=httpx.Response(200, json={"data": {"uuid": "u-1", "username": "reader", "email": "r@x"}})
        )

        user = await client.users.get_me()

        assert user.uuid == "u-1"
        assert user.is_author is False

    @pytest.mark.asyncio
    @respx.mock
    async def test_upgrade_to_author(self, client):
        route = respx.post(f"{API}/author/upgrade-to-author").mock(
            return_value=httpx.Response(200, json={"data": {"isAuthor": True}})
        )

        await client.users.upgrade_to_author("654321")

        assert body(route) == {"verificationCode": "654321"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_library_check_requires_literal_true(self, client):
        respx.get(f"{API}/library/check/1").mock(return_value=httpx.Response(200, json={"data": True}))
        respx.get(f"{API}/library/check/2").mock(return_value=httpx.Response(200, json={"data": "true"}))

        assert await client.library.check(1) is True
        assert await client.library.check(2) is False


# =============================================================================
# Search
# =============================================================================

class TestSearchService:
    """Tests for SearchService."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_all(self, client):
        novels = respx.get(f"{API}/search/novels").mock(
            return_value=httpx.Response(200, json={"data": {"novels": [{"id": 1}], "novelCount": 1}})
        )
        respx.get(f"{API}/search/chapters").mock(
            return_value=httpx.Response(
                200, json={"data": {"chapters": [{"id": 4}, {"id": 5}], "chapterCount": 2}}
            )
        )

        result = await client.search.search_all("dragon")

        assert result.novels == [{"id": 1}]
        assert result.novel_count == 1
        assert result.chapter_count == 2
        assert novels.calls.last.request.url.params["q"] == "dragon"
        assert novels.calls.last.request.url.params["sortOrder"] == "DESC"

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_uses_light_budget(self):
        client = YushanClient(ClientConfig(base_url=API, light_budget=RateBudget(1, 60000)))
        respx.get(f"{API}/search").mock(return_value=httpx.Response(200, json={"data": {}}))

        await client.search.search("dragon")
        with pytest.raises(ServiceError) as exc_info:
            await client.search.search("dragon")

        assert exc_info.value.message == RATE_LIMIT_MESSAGE
        assert exc_info.value.status_code == 429
        # Other clients keep their own budget.
        assert client.default.limiter.remaining() == 60


# =============================================================================
# Failures through the services
# =============================================================================

class TestServiceFailures:
    """Access-layer failures surface as readable ServiceErrors."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error(self, client):
        respx.get(f"{API}/novels/1").mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(ServiceError) as exc_info:
            await client.novels.get_novel(1)

        assert exc_info.value.message == NETWORK_MESSAGE
        assert isinstance(exc_info.value.__cause__, NetworkError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_session_expired(self, client):
        respx.get(f"{API}/library").mock(return_value=httpx.Response(401))
        respx.post(f"{API}/auth/refresh").mock(return_value=httpx.Response(401))
        client.store.set_credential("A1", "R1")

        with pytest.raises(ServiceError) as exc_info:
            await client.library.list()

        assert exc_info.value.message == SESSION_EXPIRED_MESSAGE
        assert isinstance(exc_info.value.__cause__, TokenRefreshError)
        assert not client.is_authenticated()

    @pytest.mark.asyncio
    @respx.mock
    async def test_recovered_request_returns_data(self, client):
        route = respx.get(f"{API}/library/7")
        route.side_effect = [
            httpx.Response(401),
            httpx.Response(200, json={"data": {"novelId": 7, "progress": 3}}),
        ]
        respx.post(f"{API}/auth/refresh").mock(
            return_value=httpx.Response(200, json={"data": {"accessToken": "A2"}})
        )
        client.store.set_credential("A1", "R1")

        assert await client.library.get(7) == {"novelId": 7, "progress": 3}
        assert route.calls[1].request.headers["Authorization"] == "Bearer A2"

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_page_payload(self, client):
        respx.get(f"{API}/novels").mock(return_value=httpx.Response(200, json={"data": "ok"}))

        with pytest.raises(ServiceError) as exc_info:
            await client.novels.list_novels()

        assert exc_info.value.message == "Malformed page response from server"
        assert exc_info.value.details == {"payload_type": "str"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_search_payload(self, client):
        respx.get(f"{API}/search").mock(return_value=httpx.Response(200, json={"data": [1, 2]}))

        with pytest.raises(ServiceError, match="Malformed search response"):
            await client.search.search("dragon")
