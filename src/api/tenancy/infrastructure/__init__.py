"""Infrastructure adapters for the tenancy context."""

from tenancy.infrastructure.in_memory import (
    InMemoryBrandingStore,
    InMemoryPrincipalProvider,
    InMemoryTenantSource,
    InMemoryTokenAbilityStore,
)
from tenancy.infrastructure.tenant_registry import CachedTenantRegistry, normalize_host

__all__ = [
    "CachedTenantRegistry",
    "InMemoryBrandingStore",
    "InMemoryPrincipalProvider",
    "InMemoryTenantSource",
    "InMemoryTokenAbilityStore",
    "normalize_host",
]
