"""Collaborator protocols (ports) for the tenancy bounded context.

The request pipeline depends on these read-only lookups but does not
implement their storage. Implementations may cache, but must never let
one request's lookups depend on another request's headers or claims.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import Principal, TenantId


@runtime_checkable
class ITenantSource(Protocol):
    """Loads the complete tenant list from wherever tenants are stored."""

    async def load_tenants(self) -> list[Tenant]:
        """Return all tenants, active and inactive.

        Raises:
            TenantSourceUnavailableError: If the backing store cannot be read
        """
        ...


@runtime_checkable
class ITenantRegistry(Protocol):
    """Read access to the registered domains of all tenants."""

    async def all_hostnames(self) -> list[str]:
        """Return every hostname of every active tenant.

        Returns:
            Normalized ``host`` or ``host:port`` strings (primary and
            additional domains), without scheme.
        """
        ...

    async def find_by_hostname(self, host: str) -> Tenant | None:
        """Find the active tenant serving a hostname.

        Args:
            host: Bare hostname, without port

        Returns:
            The active tenant whose primary or additional domains contain
            host, or None
        """
        ...

    async def find_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Find an active tenant by id.

        Args:
            tenant_id: The tenant identifier

        Returns:
            The active tenant, or None if unknown or deactivated
        """
        ...


@runtime_checkable
class ITokenAbilityStore(Protocol):
    """Read access to the abilities granted to issued API tokens."""

    async def abilities_for(self, token_id: str) -> list[str]:
        """Return the raw ability strings granted to a token.

        Args:
            token_id: The token id (the part before ``|`` in the bearer token)

        Returns:
            Ability strings in issuance order, empty if the token is unknown
        """
        ...


@runtime_checkable
class IBrandingStore(Protocol):
    """Read access to active brandings."""

    async def active_for_tenant(self, tenant_id: TenantId) -> Branding | None:
        """Return the active branding scoped to a tenant, if any."""
        ...

    async def active_for_user(self, user_id: str) -> Branding | None:
        """Return the active branding scoped to a user, if any."""
        ...


@runtime_checkable
class IPrincipalProvider(Protocol):
    """Authenticates bearer tokens.

    Credential verification lives outside this service; the pipeline only
    needs to know whether a bearer token belongs to an authenticated user.
    """

    async def from_bearer_token(self, token: str) -> Principal | None:
        """Return the principal owning a bearer token, or None if invalid."""
        ...
