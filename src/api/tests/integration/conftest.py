"""Integration test fixtures running the full ASGI application.

The application is wired with in-memory collaborators, so no external
services are required.
"""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, StreamingResponse
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from starlette.requests import Request

from infrastructure.settings import (
    CorsSettings,
    SessionSettings,
    Settings,
    TenancySettings,
)
from main import create_app
from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.in_memory import (
    InMemoryBrandingStore,
    InMemoryPrincipalProvider,
    InMemoryTenantSource,
    InMemoryTokenAbilityStore,
)

ASSET_BASE_URL = "https://api.csl-brands.com"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (full ASGI application)",
    )


def build_app(debug: bool = False) -> FastAPI:
    """Application with two tenants, one branding and two API tokens."""
    tenants = InMemoryTenantSource(
        [
            Tenant(
                id=TenantId(value=1),
                name="CSL Learning",
                primary_domain="learning.csl-brands.com",
                additional_domains=("training.acme.com",),
            ),
            Tenant(
                id=TenantId(value=42),
                name="Tenant App",
                primary_domain="app.tenant.com",
            ),
            Tenant(
                id=TenantId(value=5),
                name="Closed",
                primary_domain="closed.example.com",
                is_active=False,
            ),
        ]
    )
    brandings = InMemoryBrandingStore(
        [
            Branding(
                id=10,
                company_name="Acme",
                tenant_id=TenantId(value=1),
                logo_path="logos/acme.png",
                primary_color="#0055ff",
            )
        ]
    )
    abilities = InMemoryTokenAbilityStore(
        {
            "1": ["read"],
            "2": ["read", "environment_id:42"],
        }
    )
    principals = InMemoryPrincipalProvider(
        {
            "1|plain-token": "user-1",
            "2|scoped-token": "user-2",
        }
    )

    app = create_app(
        tenant_source=tenants,
        ability_store=abilities,
        branding_store=brandings,
        principal_provider=principals,
        settings=Settings(debug=debug),
        session_settings=SessionSettings(
            secret_key=SecretStr("integration-secret"),
            secure=True,
            same_site="lax",
        ),
        cors_settings=CorsSettings(),
        tenancy_settings=TenancySettings(
            asset_base_url=ASSET_BASE_URL,
            dev_hosts=["localhost:3000"],
        ),
    )

    @app.get("/api/data")
    def data() -> dict:
        return {"data": [1, 2, 3]}

    @app.get("/api/list")
    def listing() -> list:
        return [1, 2, 3]

    @app.get("/page", response_class=HTMLResponse)
    def page() -> str:
        return "<html><body>hi</body></html>"

    @app.get("/stream")
    def stream() -> StreamingResponse:
        def chunks():
            yield b"one,"
            yield b"two"

        return StreamingResponse(chunks(), media_type="text/csv")

    @app.post("/api/session")
    async def write_session(request: Request) -> dict:
        request.session["visits"] = request.session.get("visits", 0) + 1
        return {"visits": request.session["visits"]}

    @app.delete("/api/session")
    async def clear_session(request: Request) -> dict:
        request.session.clear()
        return {"cleared": True}

    return app


@pytest_asyncio.fixture
async def async_client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the application.

    Uses LifespanManager so the tenant registry is warmed at startup.
    """
    app = build_app()
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport, base_url="https://api.csl-brands.com"
        ) as client:
            yield client


@pytest_asyncio.fixture
async def debug_client() -> AsyncIterator[AsyncClient]:
    app = build_app(debug=True)
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport, base_url="https://api.csl-brands.com"
        ) as client:
            yield client


@pytest.fixture
def frontend_headers() -> dict[str, str]:
    return {
        "X-Frontend-Domain": "learning.csl-brands.com",
        "Origin": "https://learning.csl-brands.com",
    }
