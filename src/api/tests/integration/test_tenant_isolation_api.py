"""End-to-end tests for the tenant isolation pipeline."""

from http.cookies import SimpleCookie

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


def set_cookies(response) -> dict[str, str]:
    """Map cookie name to its raw Set-Cookie header."""
    headers = response.headers.get_list("set-cookie")
    return {header.split("=", 1)[0]: header for header in headers}


def cookie_value(header: str) -> str:
    cookie: SimpleCookie = SimpleCookie()
    cookie.load(header)
    return next(iter(cookie.values())).value


class TestFrontendRequest:
    """A tenant frontend calling the API with an authenticated user."""

    @pytest.mark.asyncio
    async def test_environment_branding_and_namespaced_session(
        self, async_client: AsyncClient
    ):
        response = await async_client.get(
            "/api/data",
            headers={
                "X-Frontend-Domain": "learning.csl-brands.com",
                "Authorization": "Bearer 1|plain-token",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == [1, 2, 3]
        assert body["environment"]["primary_domain"] == "learning.csl-brands.com"
        assert body["environment"]["id"] == 1
        assert body["branding"]["company_name"] == "Acme"
        assert body["branding"]["logo_url"] == (
            "https://api.csl-brands.com/storage/logos/acme.png"
        )
        assert response.headers["content-length"] == str(len(response.content))

        cookies = set_cookies(response)
        assert "csl_session_learning_csl_brands_com" in cookies
        assert "csl_session" not in cookies

    @pytest.mark.asyncio
    async def test_cookie_scopes(self, async_client: AsyncClient, frontend_headers):
        response = await async_client.get("/api/data", headers=frontend_headers)

        cookies = set_cookies(response)
        session = cookies["csl_session_learning_csl_brands_com"]
        xsrf = cookies["XSRF-TOKEN"]

        assert "Domain=" not in session
        assert "HttpOnly" in session
        assert "SameSite=none" in session
        assert "Secure" in session

        assert "Domain=.csl-brands.com" in xsrf
        assert "HttpOnly" not in xsrf
        assert "Path=/" in xsrf
        assert len(response.headers.get_list("set-cookie")) == 2

    @pytest.mark.asyncio
    async def test_cors_headers_for_registered_origin(
        self, async_client: AsyncClient, frontend_headers
    ):
        response = await async_client.get("/api/data", headers=frontend_headers)

        assert response.headers["access-control-allow-origin"] == (
            "https://learning.csl-brands.com"
        )
        assert response.headers["access-control-allow-credentials"] == "true"
        assert "Origin" in response.headers["vary"]
        assert response.headers["x-request-id"]

    @pytest.mark.asyncio
    async def test_token_ability_overrides_frontend_domain(
        self, async_client: AsyncClient
    ):
        response = await async_client.get(
            "/api/context",
            headers={
                "X-Frontend-Domain": "learning.csl-brands.com",
                "Authorization": "Bearer 2|scoped-token",
            },
        )

        body = response.json()
        assert body["tenant_id"] == 42
        assert body["resolution_source"] == "token_ability"
        assert body["environment"]["primary_domain"] == "app.tenant.com"
        # The cookie namespace still follows the frontend
        assert body["session_cookie"] == "csl_session_learning_csl_brands_com"
        assert "branding" not in body


class TestUnresolvedRequests:
    """Requests that belong to no tenant."""

    @pytest.mark.asyncio
    async def test_plain_request_uses_default_cookie(self, async_client: AsyncClient):
        response = await async_client.get("/api/data")

        body = response.json()
        assert "environment" not in body
        assert "branding" not in body
        assert "_debug" not in body

        cookies = set_cookies(response)
        assert "csl_session" in cookies
        assert "Domain=" not in cookies["XSRF-TOKEN"]
        assert "access-control-allow-origin" not in response.headers
        assert response.headers["vary"] == "Origin"

    @pytest.mark.asyncio
    async def test_deactivated_tenant(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/context", headers={"X-Frontend-Domain": "closed.example.com"}
        )

        body = response.json()
        assert body["tenant_id"] is None
        assert "environment" not in body

    @pytest.mark.asyncio
    async def test_debug_hint(self, debug_client: AsyncClient):
        response = await debug_client.get(
            "/api/data",
            headers={
                "X-Frontend-Domain": "unknown.example.com",
                "Origin": "https://unknown.example.com",
            },
        )

        assert response.json()["_debug"]["requested_domain"] == "unknown.example.com"

    @pytest.mark.asyncio
    async def test_unregistered_origin_gets_no_cors_headers(
        self, async_client: AsyncClient
    ):
        response = await async_client.get(
            "/api/data", headers={"Origin": "https://evil.example.com"}
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers
        assert response.headers["vary"] == "Origin"


class TestPreflight:
    """CORS preflight handling."""

    @pytest.mark.asyncio
    async def test_allowed_preflight(self, async_client: AsyncClient):
        response = await async_client.options(
            "/api/data",
            headers={
                "Origin": "https://app.tenant.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "https://app.tenant.com"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "X-Frontend-Domain" in response.headers["access-control-allow-headers"]
        assert response.headers["access-control-max-age"] == "600"
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_denied_preflight_is_still_no_content(
        self, async_client: AsyncClient
    ):
        response = await async_client.options(
            "/api/data",
            headers={
                "Origin": "https://evil.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 204
        assert "access-control-allow-origin" not in response.headers


class TestNonJsonResponses:
    """Responses the augmenter must leave alone."""

    @pytest.mark.asyncio
    async def test_html_is_untouched(self, async_client: AsyncClient, frontend_headers):
        response = await async_client.get("/page", headers=frontend_headers)

        assert response.text == "<html><body>hi</body></html>"
        assert "csl_session_learning_csl_brands_com" in set_cookies(response)

    @pytest.mark.asyncio
    async def test_streaming_body_passes_through(
        self, async_client: AsyncClient, frontend_headers
    ):
        response = await async_client.get("/stream", headers=frontend_headers)

        assert response.content == b"one,two"
        assert response.headers["access-control-allow-origin"] == (
            "https://learning.csl-brands.com"
        )

    @pytest.mark.asyncio
    async def test_json_array_is_untouched(
        self, async_client: AsyncClient, frontend_headers
    ):
        response = await async_client.get("/api/list", headers=frontend_headers)
        assert response.json() == [1, 2, 3]


class TestSessionLifecycle:
    """Session persistence under the namespaced cookie."""

    @pytest.mark.asyncio
    async def test_session_round_trip_is_isolated_per_frontend(
        self, async_client: AsyncClient
    ):
        learning = {"X-Frontend-Domain": "learning.csl-brands.com"}
        first = await async_client.post("/api/session", headers=learning)
        session_cookie = cookie_value(
            set_cookies(first)["csl_session_learning_csl_brands_com"]
        )
        xsrf = cookie_value(set_cookies(first)["XSRF-TOKEN"])

        second = await async_client.post(
            "/api/session",
            headers={
                **learning,
                "Cookie": f"csl_session_learning_csl_brands_com={session_cookie}",
            },
        )
        other_tenant = await async_client.post(
            "/api/session",
            headers={
                "X-Frontend-Domain": "app.tenant.com",
                "Cookie": f"csl_session_learning_csl_brands_com={session_cookie}",
            },
        )

        assert first.json()["visits"] == 1
        assert second.json()["visits"] == 2
        assert cookie_value(set_cookies(second)["XSRF-TOKEN"]) == xsrf
        assert other_tenant.json()["visits"] == 1

    @pytest.mark.asyncio
    async def test_cleared_session_expires_cookie(self, async_client: AsyncClient):
        response = await async_client.delete(
            "/api/session", headers={"X-Frontend-Domain": "learning.csl-brands.com"}
        )

        session = set_cookies(response)["csl_session_learning_csl_brands_com"]
        assert "Max-Age=0" in session
        assert "XSRF-TOKEN" not in set_cookies(response)


class TestHealth:
    """Health endpoint."""

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
