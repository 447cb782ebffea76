"""Domain aggregates for the tenancy context.

Tenants and brandings are created and changed by administrative flows
outside this service. The request pipeline only reads them, so both
aggregates are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass

from tenancy.domain.value_objects import TenantId


@dataclass(frozen=True)
class Tenant:
    """Tenant (environment) reachable through one or more custom domains.

    Business rules:
    - The primary domain is unique across tenants
    - A hostname maps to at most one active tenant
    - Inactive tenants are never matched by the pipeline
    """

    id: TenantId
    name: str
    primary_domain: str
    additional_domains: tuple[str, ...] = ()
    is_active: bool = True

    def all_domains(self) -> tuple[str, ...]:
        """Primary domain followed by additional domains, in order."""
        return (self.primary_domain, *self.additional_domains)

    def serves(self, host: str) -> bool:
        """Whether host is one of this tenant's registered domains.

        Comparison is case-insensitive; hostnames are not case-sensitive.
        """
        host = host.strip().lower()
        if not host:
            return False
        return any(domain.strip().lower() == host for domain in self.all_domains())


@dataclass(frozen=True)
class Branding:
    """Visual identity attached to a tenant or, failing that, to a user.

    Asset paths are stored relative to the public storage root.
    """

    id: int
    company_name: str | None = None
    tenant_id: TenantId | None = None
    user_id: str | None = None
    logo_path: str | None = None
    favicon_path: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    accent_color: str | None = None
    font_family: str | None = None
    custom_css: str | None = None
    custom_js: str | None = None
    is_active: bool = True
