"""Domain probe for the cached tenant registry.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRegistryProbe(Protocol):
    """Domain probe for tenant registry operations."""

    def registry_cache_hit(self) -> None:
        """Record that the cached registry snapshot was reused."""
        ...

    def registry_refreshed(self, tenant_count: int, hostname_count: int) -> None:
        """Record that the registry snapshot was reloaded from the source."""
        ...

    def registry_refresh_failed(self, error: Exception) -> None:
        """Record that reloading tenants from the source failed."""
        ...

    def duplicate_hostname(self, hostname: str, tenant_ids: list[int]) -> None:
        """Record that several active tenants claim the same hostname."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRegistryProbe:
    """Default implementation of TenantRegistryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRegistryProbe(logger=self._logger, context=context)

    def registry_cache_hit(self) -> None:
        """Record that the cached registry snapshot was reused."""
        self._logger.debug("tenant_registry_cache_hit", **self._get_context_kwargs())

    def registry_refreshed(self, tenant_count: int, hostname_count: int) -> None:
        """Record that the registry snapshot was reloaded from the source."""
        self._logger.info(
            "tenant_registry_refreshed",
            tenant_count=tenant_count,
            hostname_count=hostname_count,
            **self._get_context_kwargs(),
        )

    def registry_refresh_failed(self, error: Exception) -> None:
        """Record that reloading tenants from the source failed."""
        self._logger.error(
            "tenant_registry_refresh_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def duplicate_hostname(self, hostname: str, tenant_ids: list[int]) -> None:
        """Record that several active tenants claim the same hostname."""
        self._logger.warning(
            "tenant_registry_duplicate_hostname",
            hostname=hostname,
            tenant_ids=tenant_ids,
            message="Hostname is claimed by several active tenants; lowest id wins",
            **self._get_context_kwargs(),
        )
