"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents the outcome of
tenant resolution for a single request. It is framework-agnostic and
contains no business logic, making it safe for the shared kernel.

The actual resolution logic (token abilities, host matching) lives in the
tenancy bounded context's application layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ResolutionSource(StrEnum):
    """How the tenant of a request was determined."""

    TOKEN_ABILITY = "token_ability"
    HOST_MATCH = "host_match"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedTenantContext:
    """Resolved tenant context for the current request.

    Built fresh for every request and never cached across requests.
    An unresolved context is a valid terminal state meaning "no
    tenant-specific behavior applies", never an implicit default tenant.

    Attributes:
        tenant_id: The resolved tenant identifier, or None if unresolved.
        source: How the tenant was resolved.
    """

    tenant_id: int | None
    source: ResolutionSource

    def __post_init__(self) -> None:
        if (self.tenant_id is None) != (self.source is ResolutionSource.NONE):
            raise ValueError(
                "tenant_id must be None exactly when source is 'none', "
                f"got tenant_id={self.tenant_id!r} source={self.source!r}"
            )

    @property
    def is_resolved(self) -> bool:
        """Whether a tenant was found for the request."""
        return self.tenant_id is not None

    @classmethod
    def unresolved(cls) -> ResolvedTenantContext:
        """Context for requests that belong to no tenant."""
        return cls(tenant_id=None, source=ResolutionSource.NONE)
