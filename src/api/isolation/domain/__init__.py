"""Domain layer for the isolation context."""

from isolation.domain.value_objects import (
    CSRF_SESSION_KEY,
    SESSION_COOKIE_PREFIX,
    XSRF_COOKIE_NAME,
    CorsPolicy,
)

__all__ = [
    "CSRF_SESSION_KEY",
    "SESSION_COOKIE_PREFIX",
    "XSRF_COOKIE_NAME",
    "CorsPolicy",
]
