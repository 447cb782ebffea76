"""Domain exceptions for the tenancy bounded context.

These are raised by adapters when tenant data violates a domain rule.
The request pipeline catches them at its boundary and degrades to
"no tenant-specific behavior"; they never reach the end user.
"""


class TenancyError(Exception):
    """Base class for tenancy errors."""


class DuplicateHostnameError(TenancyError):
    """Raised when two active tenants claim the same hostname.

    A hostname must map to at most one active tenant.
    """

    def __init__(self, hostname: str, tenant_ids: list[int]):
        self.hostname = hostname
        self.tenant_ids = tenant_ids
        super().__init__(
            f"Hostname {hostname!r} is claimed by several active tenants: {tenant_ids}"
        )


class TenantSourceUnavailableError(TenancyError):
    """Raised when the tenant source cannot be read."""
