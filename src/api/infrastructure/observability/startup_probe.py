"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_started(self, app_name: str, version: str, debug: bool) -> None:
        """Record that the application finished starting up."""
        ...

    def tenant_registry_warmed(self, hostname_count: int) -> None:
        """Record that the tenant hostname cache was loaded at startup."""
        ...

    def tenant_registry_warmup_failed(self, error: Exception) -> None:
        """Record that the tenant hostname cache could not be loaded at startup."""
        ...

    def insecure_session_secret(self) -> None:
        """Record that sessions are signed with the built-in development key."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def application_started(self, app_name: str, version: str, debug: bool) -> None:
        """Record that the application finished starting up."""
        self._logger.info(
            "application_started",
            app_name=app_name,
            version=version,
            debug=debug,
            **self._get_context_kwargs(),
        )

    def tenant_registry_warmed(self, hostname_count: int) -> None:
        """Record that the tenant hostname cache was loaded at startup."""
        self._logger.info(
            "tenant_registry_warmed",
            hostname_count=hostname_count,
            **self._get_context_kwargs(),
        )

    def tenant_registry_warmup_failed(self, error: Exception) -> None:
        """Record that the tenant hostname cache could not be loaded at startup."""
        self._logger.warning(
            "tenant_registry_warmup_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def insecure_session_secret(self) -> None:
        """Record that sessions are signed with the built-in development key."""
        self._logger.warning(
            "insecure_session_secret",
            **self._get_context_kwargs(),
        )
