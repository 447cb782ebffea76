"""Domain probe for per-request CORS decisions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CorsPolicyProbe(Protocol):
    """Domain probe for CORS policy computation."""

    def origin_allowed(self, origin: str) -> None:
        """Record that the request's origin was echoed back."""
        ...

    def origin_denied(self, origin: str, origin_host: str | None) -> None:
        """Record that the request's origin is not a stateful host."""
        ...

    def stateful_hosts_unavailable(self, error: Exception) -> None:
        """Record that the host list could not be loaded; access is denied."""
        ...

    def with_context(self, context: ObservationContext) -> CorsPolicyProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCorsPolicyProbe:
    """Default implementation of CorsPolicyProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCorsPolicyProbe:
        """Create a new probe with observation context bound."""
        return DefaultCorsPolicyProbe(logger=self._logger, context=context)

    def origin_allowed(self, origin: str) -> None:
        """Record that the request's origin was echoed back."""
        self._logger.debug(
            "cors_origin_allowed",
            origin=origin,
            **self._get_context_kwargs(),
        )

    def origin_denied(self, origin: str, origin_host: str | None) -> None:
        """Record that the request's origin is not a stateful host."""
        self._logger.info(
            "cors_origin_denied",
            origin=origin,
            origin_host=origin_host,
            **self._get_context_kwargs(),
        )

    def stateful_hosts_unavailable(self, error: Exception) -> None:
        """Record that the host list could not be loaded; access is denied."""
        self._logger.error(
            "cors_stateful_hosts_unavailable",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
