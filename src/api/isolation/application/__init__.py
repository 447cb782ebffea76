"""Application services for the isolation bounded context."""

from isolation.application.cors_policy import CorsPolicyEngine
from isolation.application.csrf_cookie import (
    CsrfCookieSynchronizer,
    xsrf_cookie_domain,
)
from isolation.application.session_namespace import (
    SessionCookieNamespacer,
    namespaced_cookie_name,
)

__all__ = [
    "CorsPolicyEngine",
    "CsrfCookieSynchronizer",
    "SessionCookieNamespacer",
    "namespaced_cookie_name",
    "xsrf_cookie_domain",
]
