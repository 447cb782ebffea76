"""Domain probe for environment (tenant) resolution.

Captures how each request's tenant was determined: from an API token's
environment ability, from the declared frontend host, or not at all.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class EnvironmentResolverProbe(Protocol):
    """Domain probe for environment resolution operations."""

    def tenant_resolved_from_token_ability(self, tenant_id: int, token_id: str) -> None:
        """Record that the tenant came from the token's environment ability."""
        ...

    def tenant_resolved_from_host(self, tenant_id: int, host: str) -> None:
        """Record that the tenant came from the declared frontend host."""
        ...

    def tenant_unresolved(self, declared_host: str | None) -> None:
        """Record that no tenant applies to the request."""
        ...

    def frontend_domain_mismatch(self, declared_host: str, observed_host: str) -> None:
        """Record that X-Frontend-Domain disagreed with Origin/Referer."""
        ...

    def resolution_step_failed(self, step: str, error: Exception) -> None:
        """Record that a collaborator lookup failed and the step was skipped."""
        ...

    def with_context(self, context: ObservationContext) -> EnvironmentResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultEnvironmentResolverProbe:
    """Default implementation of EnvironmentResolverProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultEnvironmentResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultEnvironmentResolverProbe(logger=self._logger, context=context)

    def tenant_resolved_from_token_ability(self, tenant_id: int, token_id: str) -> None:
        """Record that the tenant came from the token's environment ability."""
        self._logger.debug(
            "environment_resolved_from_token_ability",
            resolved_tenant_id=tenant_id,
            token_id=token_id,
            **self._get_context_kwargs(),
        )

    def tenant_resolved_from_host(self, tenant_id: int, host: str) -> None:
        """Record that the tenant came from the declared frontend host."""
        self._logger.debug(
            "environment_resolved_from_host",
            resolved_tenant_id=tenant_id,
            host=host,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(self, declared_host: str | None) -> None:
        """Record that no tenant applies to the request."""
        self._logger.debug(
            "environment_unresolved",
            declared_host=declared_host,
            **self._get_context_kwargs(),
        )

    def frontend_domain_mismatch(self, declared_host: str, observed_host: str) -> None:
        """Record that X-Frontend-Domain disagreed with Origin/Referer."""
        self._logger.warning(
            "environment_frontend_domain_mismatch",
            declared_host=declared_host,
            observed_host=observed_host,
            message="X-Frontend-Domain ignored because it does not match Origin/Referer",
            **self._get_context_kwargs(),
        )

    def resolution_step_failed(self, step: str, error: Exception) -> None:
        """Record that a collaborator lookup failed and the step was skipped."""
        self._logger.error(
            "environment_resolution_step_failed",
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
