"""Value objects for the isolation domain."""

from __future__ import annotations

from dataclasses import dataclass

SESSION_COOKIE_PREFIX = "csl_session_"
XSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_SESSION_KEY = "_token"


@dataclass(frozen=True)
class CorsPolicy:
    """CORS decision for a single request.

    Attributes:
        allowed_origins: Either empty (no credentialed cross-origin access)
            or exactly the request's Origin, echoed verbatim. Never a
            wildcard, since responses carry credentials.
        stateful_hosts: Every ``host[:port]`` trusted for cookie-bearing
            cross-origin requests, regardless of the request's origin.
    """

    allowed_origins: tuple[str, ...] = ()
    stateful_hosts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if "*" in self.allowed_origins:
            raise ValueError("Wildcard origins are not allowed with credentials")
        if len(self.allowed_origins) > 1:
            raise ValueError("At most one origin is echoed per request")

    @property
    def allowed_origin(self) -> str | None:
        """The echoed origin, or None when cross-origin access is denied."""
        return self.allowed_origins[0] if self.allowed_origins else None

    def is_stateful(self, host: str | None) -> bool:
        """Whether ``host[:port]`` may make credentialed requests."""
        return host is not None and host in self.stateful_hosts

    @classmethod
    def deny_all(cls) -> CorsPolicy:
        """Policy granting no cross-origin access."""
        return cls()
