"""XSRF-TOKEN cookie synchronization.

The session cookie is scoped to the exact frontend host, but frontend
JavaScript served from a sibling subdomain still has to read the CSRF
token. The ``XSRF-TOKEN`` cookie is therefore scoped to the root domain
of the frontend and never marked HttpOnly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from isolation.application.observability import CookieProbe, DefaultCookieProbe
from isolation.domain.value_objects import XSRF_COOKIE_NAME
from shared_kernel.http.cookies import CookieSpec, SameSite, parse_set_cookie
from shared_kernel.http.domain_parser import FrontendOrigin


def xsrf_cookie_domain(frontend: FrontendOrigin | None) -> str | None:
    """Domain attribute for the XSRF cookie, None for host-only scope."""
    if frontend is None or frontend.root_domain is None:
        return None
    return f".{frontend.root_domain}"


class CsrfCookieSynchronizer:
    """Computes the single ``XSRF-TOKEN`` cookie a response must carry."""

    def __init__(
        self,
        lifetime_seconds: int = 7200,
        secure: bool = True,
        same_site: SameSite = "lax",
        probe: CookieProbe | None = None,
    ):
        self._lifetime_seconds = lifetime_seconds
        self._secure = secure
        self._same_site = same_site
        self._probe = probe or DefaultCookieProbe()

    def synchronize(
        self,
        set_cookie_headers: Iterable[str],
        session_token: str | None,
        frontend: FrontendOrigin | None,
        probe: CookieProbe | None = None,
    ) -> CookieSpec | None:
        """Compute the desired XSRF cookie of a response.

        Args:
            set_cookie_headers: ``Set-Cookie`` values the handler produced.
            session_token: CSRF token held by the session, if any.
            frontend: Frontend origin detected for the request.
            probe: Request-bound probe overriding the default.

        Returns:
            The XSRF cookie to emit in place of any existing ones, or None
            when the response needs no XSRF cookie.
        """
        probe = probe or self._probe

        existing = self._last_xsrf_cookie(set_cookie_headers)
        domain = xsrf_cookie_domain(frontend)
        if domain is None:
            probe.xsrf_cookie_host_scoped(
                reason="no_frontend" if frontend is None else "no_root_domain"
            )

        if existing is not None:
            spec = replace(
                existing,
                domain=domain,
                path="/",
                http_only=False,
                same_site=self._same_site,
            )
            probe.xsrf_cookie_rewritten(domain=domain)
            return spec

        if not session_token:
            return None

        probe.xsrf_cookie_created(domain=domain)
        return CookieSpec(
            name=XSRF_COOKIE_NAME,
            value=session_token,
            domain=domain,
            path="/",
            max_age=self._lifetime_seconds,
            secure=self._secure,
            http_only=False,
            same_site=self._same_site,
        )

    @staticmethod
    def _last_xsrf_cookie(set_cookie_headers: Iterable[str]) -> CookieSpec | None:
        found: CookieSpec | None = None
        for header in set_cookie_headers:
            spec = parse_set_cookie(header)
            if spec is not None and spec.name == XSRF_COOKIE_NAME:
                found = spec
        return found
