"""Observability for isolation application services."""

from isolation.application.observability.cookie_probe import (
    CookieProbe,
    DefaultCookieProbe,
)
from isolation.application.observability.cors_policy_probe import (
    CorsPolicyProbe,
    DefaultCorsPolicyProbe,
)

__all__ = [
    "CookieProbe",
    "CorsPolicyProbe",
    "DefaultCookieProbe",
    "DefaultCorsPolicyProbe",
]
