"""Domain probe for session and XSRF cookie decisions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CookieProbe(Protocol):
    """Domain probe for cookie scoping operations."""

    def session_namespace_selected(self, cookie_name: str, host: str) -> None:
        """Record that a frontend-specific session cookie name was chosen."""
        ...

    def session_namespace_defaulted(self, cookie_name: str) -> None:
        """Record that no frontend was detected and the default name applies."""
        ...

    def xsrf_cookie_created(self, domain: str | None) -> None:
        """Record that an XSRF cookie was added to the response."""
        ...

    def xsrf_cookie_rewritten(self, domain: str | None) -> None:
        """Record that an existing XSRF cookie was rescoped."""
        ...

    def xsrf_cookie_host_scoped(self, reason: str) -> None:
        """Record that the XSRF cookie stays host-only, and why."""
        ...

    def with_context(self, context: ObservationContext) -> CookieProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCookieProbe:
    """Default implementation of CookieProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCookieProbe:
        """Create a new probe with observation context bound."""
        return DefaultCookieProbe(logger=self._logger, context=context)

    def session_namespace_selected(self, cookie_name: str, host: str) -> None:
        """Record that a frontend-specific session cookie name was chosen."""
        self._logger.debug(
            "session_namespace_selected",
            cookie_name=cookie_name,
            host=host,
            **self._get_context_kwargs(),
        )

    def session_namespace_defaulted(self, cookie_name: str) -> None:
        """Record that no frontend was detected and the default name applies."""
        self._logger.debug(
            "session_namespace_defaulted",
            cookie_name=cookie_name,
            **self._get_context_kwargs(),
        )

    def xsrf_cookie_created(self, domain: str | None) -> None:
        """Record that an XSRF cookie was added to the response."""
        self._logger.debug(
            "xsrf_cookie_created",
            domain=domain,
            **self._get_context_kwargs(),
        )

    def xsrf_cookie_rewritten(self, domain: str | None) -> None:
        """Record that an existing XSRF cookie was rescoped."""
        self._logger.debug(
            "xsrf_cookie_rewritten",
            domain=domain,
            **self._get_context_kwargs(),
        )

    def xsrf_cookie_host_scoped(self, reason: str) -> None:
        """Record that the XSRF cookie stays host-only, and why."""
        self._logger.debug(
            "xsrf_cookie_host_scoped",
            reason=reason,
            **self._get_context_kwargs(),
        )
