"""Domain probe for JSON response augmentation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ResponseAugmenterProbe(Protocol):
    """Domain probe for response augmentation operations."""

    def environment_attached(self, tenant_id: int) -> None:
        """Record that environment identity was added to a response."""
        ...

    def branding_attached(self, branding_id: int, environment_id: int | None) -> None:
        """Record that branding was added to a response."""
        ...

    def body_not_augmentable(self, reason: str) -> None:
        """Record that a JSON response was left untouched."""
        ...

    def augmentation_step_failed(self, step: str, error: Exception) -> None:
        """Record that a lookup failed and the step was skipped."""
        ...

    def with_context(self, context: ObservationContext) -> ResponseAugmenterProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultResponseAugmenterProbe:
    """Default implementation of ResponseAugmenterProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultResponseAugmenterProbe:
        """Create a new probe with observation context bound."""
        return DefaultResponseAugmenterProbe(logger=self._logger, context=context)

    def environment_attached(self, tenant_id: int) -> None:
        """Record that environment identity was added to a response."""
        self._logger.debug(
            "response_environment_attached",
            attached_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def branding_attached(self, branding_id: int, environment_id: int | None) -> None:
        """Record that branding was added to a response."""
        self._logger.debug(
            "response_branding_attached",
            branding_id=branding_id,
            environment_id=environment_id,
            **self._get_context_kwargs(),
        )

    def body_not_augmentable(self, reason: str) -> None:
        """Record that a JSON response was left untouched."""
        self._logger.debug(
            "response_not_augmentable",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def augmentation_step_failed(self, step: str, error: Exception) -> None:
        """Record that a lookup failed and the step was skipped."""
        self._logger.error(
            "response_augmentation_step_failed",
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
