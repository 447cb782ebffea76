"""JSON response augmentation.

Attaches the resolved tenant's identity (``environment``) and branding
(``branding``) to JSON object responses. Fields already present in the
body are never overwritten, which makes augmentation idempotent.
"""

from __future__ import annotations

import json
from typing import Any

from shared_kernel.http.domain_parser import FrontendOrigin
from shared_kernel.middleware.tenant_context import ResolvedTenantContext
from tenancy.application.branding import build_branding_payload
from tenancy.application.observability import (
    DefaultResponseAugmenterProbe,
    ResponseAugmenterProbe,
)
from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import Principal, TenantId
from tenancy.ports.repositories import IBrandingStore, ITenantRegistry

ENVIRONMENT_FIELD = "environment"
BRANDING_FIELD = "branding"
DEBUG_FIELD = "_debug"


def is_json_content_type(content_type: str | None) -> bool:
    """Whether a Content-Type header denotes JSON."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def _dump(data: dict[str, Any]) -> bytes:
    # Same rendering as fastapi.responses.JSONResponse
    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        indent=None,
        separators=(",", ":"),
    ).encode("utf-8")


class ResponseAugmenter:
    """Adds tenant identity and branding to JSON responses."""

    def __init__(
        self,
        registry: ITenantRegistry,
        branding_store: IBrandingStore,
        asset_base_url: str,
        sanitize_custom_code: bool = False,
        debug: bool = False,
        probe: ResponseAugmenterProbe | None = None,
    ):
        """Initialize the augmenter.

        Args:
            registry: Tenant registry used to load the resolved tenant.
            branding_store: Lookup for active brandings.
            asset_base_url: Base URL for absolute logo and favicon URLs.
            sanitize_custom_code: Sanitize custom CSS, drop custom JS.
            debug: Attach a ``_debug`` hint when no tenant was resolved.
            probe: Domain probe for observability.
        """
        self._registry = registry
        self._branding_store = branding_store
        self._asset_base_url = asset_base_url
        self._sanitize_custom_code = sanitize_custom_code
        self._debug = debug
        self._probe = probe or DefaultResponseAugmenterProbe()

    async def augment(
        self,
        body: bytes,
        content_type: str | None,
        tenant: ResolvedTenantContext,
        principal: Principal | None = None,
        frontend_origin: FrontendOrigin | None = None,
        origin: str | None = None,
        referer: str | None = None,
        probe: ResponseAugmenterProbe | None = None,
    ) -> bytes | None:
        """Augment a response body.

        Args:
            body: Complete response body.
            content_type: Response Content-Type header.
            tenant: Tenant context resolved for the request.
            principal: Authenticated caller, used for user-scoped branding.
            frontend_origin: Frontend origin detected for the request.
            origin: Raw Origin header, reported in debug hints.
            referer: Raw Referer header, reported in debug hints.
            probe: Request-bound probe overriding the default.

        Returns:
            The new body, or None when the response must be left untouched.
        """
        probe = probe or self._probe

        if not is_json_content_type(content_type):
            return None

        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            probe.body_not_augmentable(reason="invalid_json")
            return None

        if not isinstance(data, dict):
            probe.body_not_augmentable(reason="not_an_object")
            return None

        changed = False
        needs_tenant = ENVIRONMENT_FIELD not in data or BRANDING_FIELD not in data
        active_tenant = None
        if tenant.tenant_id is not None and needs_tenant:
            active_tenant = await self._load_tenant(
                TenantId(value=tenant.tenant_id), probe
            )

        if active_tenant is not None and ENVIRONMENT_FIELD not in data:
            data[ENVIRONMENT_FIELD] = {
                "id": active_tenant.id.value,
                "name": active_tenant.name,
                "primary_domain": active_tenant.primary_domain,
                "detected_domain": frontend_origin.host if frontend_origin else None,
            }
            probe.environment_attached(tenant_id=active_tenant.id.value)
            changed = True

        if BRANDING_FIELD not in data:
            branding = await self._find_branding(
                tenant, active_tenant, principal, probe
            )
            if branding is not None:
                data[BRANDING_FIELD] = build_branding_payload(
                    branding,
                    environment_id=tenant.tenant_id,
                    asset_base_url=self._asset_base_url,
                    sanitize_custom_code=self._sanitize_custom_code,
                )
                probe.branding_attached(
                    branding_id=branding.id, environment_id=tenant.tenant_id
                )
                changed = True

        if self._debug and not tenant.is_resolved and DEBUG_FIELD not in data:
            data[DEBUG_FIELD] = {
                "message": "No environment found for this domain",
                "requested_domain": frontend_origin.host if frontend_origin else None,
                "origin": origin,
                "referer": referer,
            }
            changed = True

        if not changed:
            return None
        return _dump(data)

    async def _load_tenant(
        self, tenant_id: TenantId, probe: ResponseAugmenterProbe
    ) -> Tenant | None:
        try:
            found = await self._registry.find_by_id(tenant_id)
        except Exception as e:
            probe.augmentation_step_failed(step="environment", error=e)
            return None

        if found is None or not found.is_active:
            return None
        return found

    async def _find_branding(
        self,
        tenant: ResolvedTenantContext,
        active_tenant: Tenant | None,
        principal: Principal | None,
        probe: ResponseAugmenterProbe,
    ) -> Branding | None:
        # A tenant id the registry no longer knows gets no branding at all
        if tenant.tenant_id is not None and active_tenant is None:
            return None
        try:
            if active_tenant is not None:
                return await self._branding_store.active_for_tenant(active_tenant.id)
            if principal is not None:
                return await self._branding_store.active_for_user(principal.user_id)
        except Exception as e:
            probe.augmentation_step_failed(step="branding", error=e)
        return None
