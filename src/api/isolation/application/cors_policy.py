"""Per-request CORS policy computation.

The allow-list is never configured statically. Every request gets the full
list of stateful hosts from the tenant registry, and its ``Origin`` is
echoed back only when that origin's ``host[:port]`` is one of them.
"""

from __future__ import annotations

from collections.abc import Sequence

from isolation.application.observability import (
    CorsPolicyProbe,
    DefaultCorsPolicyProbe,
)
from isolation.domain.value_objects import CorsPolicy
from isolation.ports.repositories import IStatefulHostSource
from shared_kernel.http.domain_parser import host_with_port


class CorsPolicyEngine:
    """Computes and renders the CORS policy of a request."""

    def __init__(
        self,
        host_source: IStatefulHostSource,
        allow_methods: Sequence[str] = ("GET", "POST", "PUT", "PATCH", "DELETE"),
        allow_headers: Sequence[str] = (),
        expose_headers: Sequence[str] = (),
        max_age: int = 600,
        probe: CorsPolicyProbe | None = None,
    ):
        """Initialize the engine.

        Args:
            host_source: Provides every trusted ``host[:port]``.
            allow_methods: Methods announced in preflight responses.
            allow_headers: Request headers announced in preflight responses.
            expose_headers: Response headers readable by frontend code.
            max_age: Preflight cache lifetime in seconds.
            probe: Domain probe for observability.
        """
        self._host_source = host_source
        self._allow_methods = tuple(allow_methods)
        self._allow_headers = tuple(allow_headers)
        self._expose_headers = tuple(expose_headers)
        self._max_age = max_age
        self._probe = probe or DefaultCorsPolicyProbe()

    async def configure(
        self,
        origin: str | None,
        probe: CorsPolicyProbe | None = None,
    ) -> CorsPolicy:
        """Compute the CORS policy for a request's ``Origin`` header.

        A failing host source yields a deny-all policy.
        """
        probe = probe or self._probe

        try:
            stateful_hosts = tuple(await self._host_source.all_hostnames())
        except Exception as e:
            probe.stateful_hosts_unavailable(error=e)
            return CorsPolicy.deny_all()

        if not origin:
            return CorsPolicy(stateful_hosts=stateful_hosts)

        origin_host = host_with_port(origin)
        if origin_host is not None and origin_host in stateful_hosts:
            probe.origin_allowed(origin=origin)
            return CorsPolicy(
                allowed_origins=(origin,),
                stateful_hosts=stateful_hosts,
            )

        probe.origin_denied(origin=origin, origin_host=origin_host)
        return CorsPolicy(stateful_hosts=stateful_hosts)

    def response_headers(
        self, policy: CorsPolicy, origin: str | None
    ) -> list[tuple[str, str]]:
        """Headers added to an actual (non-preflight) response."""
        headers: list[tuple[str, str]] = [("vary", "Origin")]

        allowed = policy.allowed_origin
        if allowed is None:
            return headers

        headers.append(("access-control-allow-origin", allowed))
        headers.append(("access-control-allow-credentials", "true"))
        if self._expose_headers:
            headers.append(
                ("access-control-expose-headers", ", ".join(self._expose_headers))
            )
        return headers

    def preflight_headers(
        self,
        policy: CorsPolicy,
        origin: str | None,
        requested_headers: str | None = None,
    ) -> list[tuple[str, str]]:
        """Headers of the ``204`` answer to a preflight request.

        Only ``Vary`` is sent when the origin is not allowed; the browser
        then refuses the actual request.
        """
        headers: list[tuple[str, str]] = [("vary", "Origin")]

        allowed = policy.allowed_origin
        if allowed is None:
            return headers

        allow_headers = ", ".join(self._allow_headers)
        if requested_headers and not allow_headers:
            allow_headers = requested_headers

        headers.append(("access-control-allow-origin", allowed))
        headers.append(("access-control-allow-credentials", "true"))
        headers.append(
            ("access-control-allow-methods", ", ".join(self._allow_methods))
        )
        if allow_headers:
            headers.append(("access-control-allow-headers", allow_headers))
        headers.append(("access-control-max-age", str(self._max_age)))
        return headers
