"""Domain probe for the tenant isolation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PipelineProbe(Protocol):
    """Domain probe for request pipeline operations."""

    def request_configured(
        self, tenant_id: int | None, source: str, session_cookie: str
    ) -> None:
        """Record the outcome of the pre-session phase."""
        ...

    def preflight_answered(self, origin: str | None, allowed: bool) -> None:
        """Record that a CORS preflight request was answered."""
        ...

    def session_cookie_rejected(self, cookie_name: str) -> None:
        """Record that a session cookie had a bad signature or had expired."""
        ...

    def principal_lookup_failed(self, error: Exception) -> None:
        """Record that the bearer token could not be checked."""
        ...

    def pipeline_step_failed(self, step: str, error: Exception) -> None:
        """Record that a pipeline step failed and was skipped."""
        ...

    def with_context(self, context: ObservationContext) -> PipelineProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPipelineProbe:
    """Default implementation of PipelineProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPipelineProbe:
        """Create a new probe with observation context bound."""
        return DefaultPipelineProbe(logger=self._logger, context=context)

    def request_configured(
        self, tenant_id: int | None, source: str, session_cookie: str
    ) -> None:
        """Record the outcome of the pre-session phase."""
        self._logger.debug(
            "request_configured",
            resolved_tenant_id=tenant_id,
            source=source,
            session_cookie=session_cookie,
            **self._get_context_kwargs(),
        )

    def preflight_answered(self, origin: str | None, allowed: bool) -> None:
        """Record that a CORS preflight request was answered."""
        self._logger.debug(
            "preflight_answered",
            origin=origin,
            allowed=allowed,
            **self._get_context_kwargs(),
        )

    def session_cookie_rejected(self, cookie_name: str) -> None:
        """Record that a session cookie had a bad signature or had expired."""
        self._logger.info(
            "session_cookie_rejected",
            cookie_name=cookie_name,
            **self._get_context_kwargs(),
        )

    def principal_lookup_failed(self, error: Exception) -> None:
        """Record that the bearer token could not be checked."""
        self._logger.warning(
            "principal_lookup_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def pipeline_step_failed(self, step: str, error: Exception) -> None:
        """Record that a pipeline step failed and was skipped."""
        self._logger.error(
            "pipeline_step_failed",
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
