"""Unit test fixtures with in-memory collaborators and mocked probes."""

from unittest.mock import MagicMock

import pytest

from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.in_memory import (
    InMemoryBrandingStore,
    InMemoryTenantSource,
    InMemoryTokenAbilityStore,
)
from tenancy.infrastructure.observability import TenantRegistryProbe
from tenancy.infrastructure.tenant_registry import CachedTenantRegistry


@pytest.fixture
def learning_tenant() -> Tenant:
    """Active tenant with one additional domain."""
    return Tenant(
        id=TenantId(value=7),
        name="CSL Learning",
        primary_domain="learning.csl-brands.com",
        additional_domains=("training.acme.com",),
    )


@pytest.fixture
def app_tenant() -> Tenant:
    """Active tenant whose frontend runs on a non-default port."""
    return Tenant(
        id=TenantId(value=12),
        name="Tenant App",
        primary_domain="app.tenant.com",
        additional_domains=("https://portal.tenant.com:8443",),
    )


@pytest.fixture
def inactive_tenant() -> Tenant:
    """Deactivated tenant."""
    return Tenant(
        id=TenantId(value=99),
        name="Gone",
        primary_domain="gone.example.com",
        is_active=False,
    )


@pytest.fixture
def tenant_source(
    learning_tenant: Tenant, app_tenant: Tenant, inactive_tenant: Tenant
) -> InMemoryTenantSource:
    return InMemoryTenantSource([learning_tenant, app_tenant, inactive_tenant])


@pytest.fixture
def mock_registry_probe() -> MagicMock:
    return MagicMock(spec=TenantRegistryProbe)


@pytest.fixture
def registry(
    tenant_source: InMemoryTenantSource, mock_registry_probe: MagicMock
) -> CachedTenantRegistry:
    return CachedTenantRegistry(
        source=tenant_source,
        dev_hosts=["localhost:3000"],
        probe=mock_registry_probe,
    )


@pytest.fixture
def ability_store() -> InMemoryTokenAbilityStore:
    return InMemoryTokenAbilityStore(
        {
            "1": ["read", "environment_id:42"],
            "2": ["read", "write"],
        }
    )


@pytest.fixture
def acme_branding(learning_tenant: Tenant) -> Branding:
    return Branding(
        id=3,
        company_name="Acme",
        tenant_id=learning_tenant.id,
        logo_path="logos/acme.png",
        primary_color="#123456",
        font_family="Inter, sans-serif",
    )


@pytest.fixture
def branding_store(acme_branding: Branding) -> InMemoryBrandingStore:
    return InMemoryBrandingStore(
        [
            acme_branding,
            Branding(id=5, company_name="Personal", user_id="user-9"),
        ]
    )
