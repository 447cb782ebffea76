"""Session cookie namespacing.

Each frontend host gets its own session cookie name, so that two tenants
open in the same browser never read or overwrite each other's session.
"""

from __future__ import annotations

from collections.abc import Mapping

from isolation.application.observability import CookieProbe, DefaultCookieProbe
from isolation.domain.value_objects import SESSION_COOKIE_PREFIX
from shared_kernel.http.cookies import CookieSpec, SameSite
from shared_kernel.http.domain_parser import (
    FrontendOrigin,
    detect_frontend_origin,
    slugify,
)


def namespaced_cookie_name(host: str) -> str:
    """Session cookie name for a frontend host.

    >>> namespaced_cookie_name("learning.csl-brands.com")
    'csl_session_learning_csl_brands_com'
    """
    return SESSION_COOKIE_PREFIX + slugify(host, "_")


class SessionCookieNamespacer:
    """Chooses the session cookie name and attributes for a request."""

    def __init__(
        self,
        default_cookie_name: str,
        lifetime_seconds: int = 7200,
        secure: bool = True,
        same_site: SameSite = "lax",
        http_only: bool = True,
        probe: CookieProbe | None = None,
    ):
        """Initialize the namespacer.

        Args:
            default_cookie_name: Name used when no frontend is detected.
            lifetime_seconds: Max-Age of the session cookie.
            secure: Whether cookies are Secure.
            same_site: Configured SameSite policy.
            http_only: Whether the session cookie is HttpOnly.
            probe: Domain probe for observability.
        """
        self._default_cookie_name = default_cookie_name
        self._lifetime_seconds = lifetime_seconds
        self._secure = secure
        self._same_site = same_site
        self._http_only = http_only
        self._probe = probe or DefaultCookieProbe()

    @property
    def default_cookie_name(self) -> str:
        return self._default_cookie_name

    def namespace_for(self, headers: Mapping[str, str]) -> str | None:
        """Frontend-specific cookie name, or None when no frontend is detected."""
        frontend = detect_frontend_origin(headers)
        if frontend is None:
            return None
        return namespaced_cookie_name(frontend.host)

    def cookie_name_for(
        self,
        frontend: FrontendOrigin | None,
        probe: CookieProbe | None = None,
    ) -> str:
        """Cookie name for an already detected frontend origin."""
        probe = probe or self._probe

        if frontend is None:
            probe.session_namespace_defaulted(cookie_name=self._default_cookie_name)
            return self._default_cookie_name

        name = namespaced_cookie_name(frontend.host)
        probe.session_namespace_selected(cookie_name=name, host=frontend.host)
        return name

    def session_cookie(self, name: str, value: str, isolated: bool) -> CookieSpec:
        """Desired session cookie.

        The cookie is always host-only. Isolated frontends talk to the API
        cross-site, so with secure cookies they get ``SameSite=None``.
        """
        same_site: SameSite = self._same_site
        if isolated and self._secure:
            same_site = "none"

        return CookieSpec(
            name=name,
            value=value,
            domain=None,
            path="/",
            max_age=self._lifetime_seconds,
            secure=self._secure,
            http_only=self._http_only,
            same_site=same_site,
        )
