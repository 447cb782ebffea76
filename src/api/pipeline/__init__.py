"""Tenant isolation request pipeline.

Composes the tenancy and isolation contexts into a two-phase pipeline
(pre-session configuration, post-response finalization) and exposes it as
ASGI middleware with FastAPI dependencies for handlers.
"""

from pipeline.context import OutgoingResponse, RequestSecurityContext
from pipeline.dependencies import get_security_context, get_tenant_context
from pipeline.middleware import TenantIsolationMiddleware
from pipeline.phases import (
    CorsHeadersFinalizer,
    CsrfCookieFinalizer,
    PostResponseFinalize,
    PreSessionConfigure,
    ResponseAugmentationFinalizer,
    SecurityContextConfigurer,
    SessionCookieFinalizer,
    TenantIsolationPipeline,
)

__all__ = [
    "CorsHeadersFinalizer",
    "CsrfCookieFinalizer",
    "OutgoingResponse",
    "PostResponseFinalize",
    "PreSessionConfigure",
    "RequestSecurityContext",
    "ResponseAugmentationFinalizer",
    "SecurityContextConfigurer",
    "SessionCookieFinalizer",
    "TenantIsolationMiddleware",
    "TenantIsolationPipeline",
    "get_security_context",
    "get_tenant_context",
]
