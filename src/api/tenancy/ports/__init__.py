"""Ports for the tenancy context."""

from tenancy.ports.exceptions import (
    DuplicateHostnameError,
    TenancyError,
    TenantSourceUnavailableError,
)
from tenancy.ports.repositories import (
    IBrandingStore,
    IPrincipalProvider,
    ITenantRegistry,
    ITenantSource,
    ITokenAbilityStore,
)

__all__ = [
    "DuplicateHostnameError",
    "IBrandingStore",
    "IPrincipalProvider",
    "ITenantRegistry",
    "ITenantSource",
    "ITokenAbilityStore",
    "TenancyError",
    "TenantSourceUnavailableError",
]
