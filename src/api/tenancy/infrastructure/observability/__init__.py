"""Observability for tenancy infrastructure adapters."""

from tenancy.infrastructure.observability.registry_probe import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)

__all__ = [
    "DefaultTenantRegistryProbe",
    "TenantRegistryProbe",
]
