"""FastAPI dependencies exposing the pipeline's per-request context.

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        tenant: Annotated[ResolvedTenantContext, Depends(get_tenant_context)],
    ):
        # tenant.tenant_id is the resolved id, or None
        ...
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from pipeline.context import RequestSecurityContext
from pipeline.middleware import SECURITY_CONTEXT_STATE_KEY, TENANT_CONTEXT_STATE_KEY
from shared_kernel.middleware.tenant_context import ResolvedTenantContext


def get_security_context(request: Request) -> RequestSecurityContext:
    """Security context built for the current request.

    Raises:
        HTTPException 500: If the tenant isolation middleware is not installed.
    """
    context = getattr(request.state, SECURITY_CONTEXT_STATE_KEY, None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Tenant isolation middleware is not installed",
        )
    return context


def get_tenant_context(request: Request) -> ResolvedTenantContext:
    """Tenant resolved for the current request.

    An unresolved tenant is returned as such; it is not an error.

    Raises:
        HTTPException 500: If the tenant isolation middleware is not installed.
    """
    tenant = getattr(request.state, TENANT_CONTEXT_STATE_KEY, None)
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Tenant isolation middleware is not installed",
        )
    return tenant
