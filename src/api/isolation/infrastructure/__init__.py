"""Infrastructure adapters for the isolation bounded context."""

from isolation.infrastructure.session_store import (
    SignedCookieSessionStore,
    ensure_csrf_token,
)

__all__ = ["SignedCookieSessionStore", "ensure_csrf_token"]
