"""In-memory collaborators for the tenancy context.

Used to wire the application when tenants, tokens and brandings are
provided by the embedding process, and as fakes in tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from shared_kernel.http.domain_parser import host_only
from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import Principal, TenantId, token_id_from_bearer
from tenancy.infrastructure.tenant_registry import normalize_host
from tenancy.ports.exceptions import DuplicateHostnameError


class InMemoryTenantSource:
    """Tenant source holding tenants in a dict keyed by id."""

    def __init__(self, tenants: Iterable[Tenant] = ()):
        self._tenants: dict[int, Tenant] = {}
        for tenant in tenants:
            self.save(tenant)

    async def load_tenants(self) -> list[Tenant]:
        """Return all tenants, active and inactive."""
        return list(self._tenants.values())

    def save(self, tenant: Tenant) -> None:
        """Add or replace a tenant.

        Raises:
            DuplicateHostnameError: If the tenant is active and one of its
                hostnames already belongs to another active tenant
        """
        if tenant.is_active:
            for domain in tenant.all_domains():
                normalized = normalize_host(domain)
                if normalized is None:
                    continue
                owners = [
                    other.id.value
                    for other in self._tenants.values()
                    if other.is_active
                    and other.id != tenant.id
                    and any(
                        host_only(normalize_host(d) or "") == host_only(normalized)
                        for d in other.all_domains()
                    )
                ]
                if owners:
                    raise DuplicateHostnameError(
                        hostname=host_only(normalized),
                        tenant_ids=[*owners, tenant.id.value],
                    )
        self._tenants[tenant.id.value] = tenant


class InMemoryTokenAbilityStore:
    """Token abilities keyed by token id."""

    def __init__(self, abilities: Mapping[str, list[str]] | None = None):
        self._abilities = {key: list(value) for key, value in (abilities or {}).items()}

    async def abilities_for(self, token_id: str) -> list[str]:
        """Return the abilities granted to a token, empty if unknown."""
        return list(self._abilities.get(token_id, []))

    def grant(self, token_id: str, abilities: list[str]) -> None:
        """Replace the abilities of a token."""
        self._abilities[token_id] = list(abilities)


class InMemoryBrandingStore:
    """Brandings held in a list; the first active match wins."""

    def __init__(self, brandings: Iterable[Branding] = ()):
        self._brandings = list(brandings)

    async def active_for_tenant(self, tenant_id: TenantId) -> Branding | None:
        """Return the active branding scoped to a tenant, if any."""
        for branding in self._brandings:
            if branding.is_active and branding.tenant_id == tenant_id:
                return branding
        return None

    async def active_for_user(self, user_id: str) -> Branding | None:
        """Return the active branding scoped to a user, if any."""
        for branding in self._brandings:
            if branding.is_active and branding.user_id == user_id:
                return branding
        return None

    def add(self, branding: Branding) -> None:
        """Register a branding."""
        self._brandings.append(branding)


class InMemoryPrincipalProvider:
    """Maps full bearer tokens to user ids."""

    def __init__(self, tokens: Mapping[str, str] | None = None):
        self._tokens = dict(tokens or {})

    async def from_bearer_token(self, token: str) -> Principal | None:
        """Return the principal owning a bearer token, or None if unknown."""
        user_id = self._tokens.get(token)
        if user_id is None:
            return None
        return Principal(user_id=user_id, token_id=token_id_from_bearer(token))

    def issue(self, token: str, user_id: str) -> None:
        """Register a bearer token for a user."""
        self._tokens[token] = user_id
