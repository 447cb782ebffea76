"""Environment (tenant) resolution.

Determines which tenant a request belongs to, in priority order:

1. the ``environment_id:<n>`` ability of the authenticated bearer token,
2. an active tenant registered for the ``X-Frontend-Domain`` host,
3. otherwise no tenant.

Resolution is pure with respect to tenant data and never raises:
collaborator failures skip the failing step.
"""

from __future__ import annotations

from shared_kernel.http.domain_parser import host_only, parse_host
from shared_kernel.middleware.tenant_context import (
    ResolutionSource,
    ResolvedTenantContext,
)
from tenancy.application.observability import (
    DefaultEnvironmentResolverProbe,
    EnvironmentResolverProbe,
)
from tenancy.domain.value_objects import (
    Principal,
    TenantId,
    first_environment_scope,
    token_id_from_bearer,
)
from tenancy.ports.repositories import ITenantRegistry, ITokenAbilityStore


class EnvironmentResolver:
    """Resolves the acting tenant of a request.

    Abilities are trusted as issued: an ``environment_id`` ability is not
    re-validated against the registry at resolution time. Consumers that
    need the tenant record look it up by id and treat a missing or inactive
    tenant as "no tenant data".
    """

    def __init__(
        self,
        registry: ITenantRegistry,
        ability_store: ITokenAbilityStore,
        probe: EnvironmentResolverProbe | None = None,
        require_consistent_frontend_domain: bool = False,
    ):
        """Initialize the resolver.

        Args:
            registry: Tenant registry used for host matching.
            ability_store: Lookup for the abilities of issued tokens.
            probe: Domain probe for observability.
            require_consistent_frontend_domain: When True, the declared
                X-Frontend-Domain host is only trusted if it matches the
                Origin (or Referer) host whenever one of those is present.
        """
        self._registry = registry
        self._ability_store = ability_store
        self._probe = probe or DefaultEnvironmentResolverProbe()
        self._require_consistent_frontend_domain = require_consistent_frontend_domain

    async def resolve(
        self,
        principal: Principal | None,
        bearer_token: str | None,
        frontend_domain: str | None,
        origin: str | None = None,
        referer: str | None = None,
        probe: EnvironmentResolverProbe | None = None,
    ) -> TenantId | None:
        """Resolve the tenant id for a request, or None if unresolved."""
        context = await self.resolve_context(
            principal=principal,
            bearer_token=bearer_token,
            frontend_domain=frontend_domain,
            origin=origin,
            referer=referer,
            probe=probe,
        )
        if context.tenant_id is None:
            return None
        return TenantId(value=context.tenant_id)

    async def resolve_context(
        self,
        principal: Principal | None,
        bearer_token: str | None,
        frontend_domain: str | None,
        origin: str | None = None,
        referer: str | None = None,
        probe: EnvironmentResolverProbe | None = None,
    ) -> ResolvedTenantContext:
        """Resolve the tenant context for a request.

        Args:
            principal: Authenticated caller, if any.
            bearer_token: Raw bearer token (``<id>|<secret>``), if any.
            frontend_domain: Raw ``X-Frontend-Domain`` header value, if any.
            origin: Raw ``Origin`` header value, if any.
            referer: Raw ``Referer`` header value, if any.
            probe: Request-bound probe overriding the resolver's default.

        Returns:
            ResolvedTenantContext, unresolved when no step matched.
        """
        probe = probe or self._probe

        if principal is not None and bearer_token:
            token_id = token_id_from_bearer(bearer_token)
            tenant_id = await self._resolve_from_token(token_id, probe)
            if tenant_id is not None:
                probe.tenant_resolved_from_token_ability(
                    tenant_id=tenant_id, token_id=token_id
                )
                return ResolvedTenantContext(
                    tenant_id=tenant_id,
                    source=ResolutionSource.TOKEN_ABILITY,
                )

        declared_host = host_only(frontend_domain).lower() if frontend_domain else None
        if declared_host and self._declared_host_is_trusted(
            declared_host, origin, referer, probe
        ):
            tenant_id = await self._resolve_from_host(declared_host, probe)
            if tenant_id is not None:
                probe.tenant_resolved_from_host(tenant_id=tenant_id, host=declared_host)
                return ResolvedTenantContext(
                    tenant_id=tenant_id,
                    source=ResolutionSource.HOST_MATCH,
                )

        probe.tenant_unresolved(declared_host=declared_host)
        return ResolvedTenantContext.unresolved()

    async def _resolve_from_token(
        self, token_id: str, probe: EnvironmentResolverProbe
    ) -> int | None:
        if not token_id:
            return None
        try:
            abilities = await self._ability_store.abilities_for(token_id)
        except Exception as e:
            probe.resolution_step_failed(step="token_ability", error=e)
            return None

        scope = first_environment_scope(abilities)
        if scope is None:
            return None
        return scope.environment_id

    async def _resolve_from_host(
        self, host: str, probe: EnvironmentResolverProbe
    ) -> int | None:
        try:
            tenant = await self._registry.find_by_hostname(host)
        except Exception as e:
            probe.resolution_step_failed(step="host_match", error=e)
            return None

        if tenant is None or not tenant.is_active:
            return None
        return tenant.id.value

    def _declared_host_is_trusted(
        self,
        declared_host: str,
        origin: str | None,
        referer: str | None,
        probe: EnvironmentResolverProbe,
    ) -> bool:
        if not self._require_consistent_frontend_domain:
            return True

        observed_host = None
        if origin:
            observed_host = parse_host(origin)
        if observed_host is None and referer:
            observed_host = parse_host(referer)

        if observed_host is None or observed_host == declared_host:
            return True

        probe.frontend_domain_mismatch(
            declared_host=declared_host, observed_host=observed_host
        )
        return False
