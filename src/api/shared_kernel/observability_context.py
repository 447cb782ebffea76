"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events emitted while a request travels through the
    tenant isolation pipeline.

    Attributes:
        request_id: Unique identifier for the current request.
        user_id: Identifier of the authenticated principal (if any).
        tenant_id: Resolved tenant identifier (if any).
        frontend_host: Frontend host the request claims to come from (if any).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", frontend_host="app.acme.com")
        probe = DefaultEnvironmentResolverProbe().with_context(context)
    """

    request_id: str | None = None
    user_id: str | None = None
    tenant_id: int | None = None
    frontend_host: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.frontend_host is not None:
            result["frontend_host"] = self.frontend_host
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: int | None) -> ObservationContext:
        """Create a new context with the tenant id set."""
        return replace(self, tenant_id=tenant_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
