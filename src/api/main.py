"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, FastAPI

from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe, StartupProbe
from infrastructure.settings import (
    CorsSettings,
    SessionSettings,
    Settings,
    TenancySettings,
    get_cors_settings,
    get_session_settings,
    get_settings,
    get_tenancy_settings,
)
from infrastructure.version import __version__
from isolation.application import (
    CorsPolicyEngine,
    CsrfCookieSynchronizer,
    SessionCookieNamespacer,
)
from isolation.infrastructure import SignedCookieSessionStore
from pipeline import (
    CorsHeadersFinalizer,
    CsrfCookieFinalizer,
    RequestSecurityContext,
    ResponseAugmentationFinalizer,
    SecurityContextConfigurer,
    SessionCookieFinalizer,
    TenantIsolationMiddleware,
    TenantIsolationPipeline,
    get_security_context,
)
from tenancy.application import EnvironmentResolver, ResponseAugmenter
from tenancy.infrastructure import (
    CachedTenantRegistry,
    InMemoryBrandingStore,
    InMemoryPrincipalProvider,
    InMemoryTenantSource,
    InMemoryTokenAbilityStore,
)
from tenancy.ports import (
    IBrandingStore,
    IPrincipalProvider,
    ITenantSource,
    ITokenAbilityStore,
)

DEFAULT_SESSION_SECRET = "change-me-in-production"


def build_pipeline(
    registry: CachedTenantRegistry,
    ability_store: ITokenAbilityStore,
    branding_store: IBrandingStore,
    principal_provider: IPrincipalProvider | None,
    settings: Settings,
    session_settings: SessionSettings,
    cors_settings: CorsSettings,
    tenancy_settings: TenancySettings,
) -> TenantIsolationPipeline:
    """Wire the tenant isolation pipeline from its collaborators."""
    resolver = EnvironmentResolver(
        registry=registry,
        ability_store=ability_store,
        require_consistent_frontend_domain=(
            tenancy_settings.require_consistent_frontend_domain
        ),
    )
    cors_engine = CorsPolicyEngine(
        host_source=registry,
        allow_methods=cors_settings.allow_methods,
        allow_headers=cors_settings.allow_headers,
        expose_headers=cors_settings.expose_headers,
        max_age=cors_settings.max_age,
    )
    namespacer = SessionCookieNamespacer(
        default_cookie_name=session_settings.cookie,
        lifetime_seconds=session_settings.lifetime_seconds,
        secure=session_settings.secure,
        same_site=session_settings.same_site,
        http_only=session_settings.http_only,
    )
    synchronizer = CsrfCookieSynchronizer(
        lifetime_seconds=session_settings.lifetime_seconds,
        secure=session_settings.secure,
        same_site=session_settings.same_site,
    )
    augmenter = ResponseAugmenter(
        registry=registry,
        branding_store=branding_store,
        asset_base_url=tenancy_settings.asset_base_url,
        sanitize_custom_code=tenancy_settings.sanitize_custom_code,
        debug=settings.debug,
    )
    session_store = SignedCookieSessionStore(
        secret_key=session_settings.secret_key.get_secret_value(),
        max_age=session_settings.lifetime_seconds,
    )

    configurer = SecurityContextConfigurer(
        resolver=resolver,
        cors_engine=cors_engine,
        namespacer=namespacer,
        principal_provider=principal_provider,
    )
    return TenantIsolationPipeline(
        configurer=configurer,
        session_store=session_store,
        finalizers=(
            SessionCookieFinalizer(namespacer, session_store),
            CsrfCookieFinalizer(synchronizer),
            CorsHeadersFinalizer(cors_engine),
            ResponseAugmentationFinalizer(augmenter),
        ),
        cors_engine=cors_engine,
    )


def create_app(
    tenant_source: ITenantSource | None = None,
    ability_store: ITokenAbilityStore | None = None,
    branding_store: IBrandingStore | None = None,
    principal_provider: IPrincipalProvider | None = None,
    settings: Settings | None = None,
    session_settings: SessionSettings | None = None,
    cors_settings: CorsSettings | None = None,
    tenancy_settings: TenancySettings | None = None,
    startup_probe: StartupProbe | None = None,
) -> FastAPI:
    """Create the application.

    Collaborators default to empty in-memory stores and settings default
    to the cached environment-based settings.
    """
    settings = settings or get_settings()
    session_settings = session_settings or get_session_settings()
    cors_settings = cors_settings or get_cors_settings()
    tenancy_settings = tenancy_settings or get_tenancy_settings()
    probe = startup_probe or DefaultStartupProbe()

    configure_logging(debug=settings.debug)

    registry = CachedTenantRegistry(
        source=tenant_source or InMemoryTenantSource(),
        dev_hosts=tenancy_settings.dev_hosts,
        cache_ttl=timedelta(seconds=tenancy_settings.registry_cache_ttl_seconds),
    )

    @asynccontextmanager
    async def tenant_edge_lifespan(app: FastAPI):
        """Application lifespan context.

        Warms the tenant hostname cache; a failing tenant source does not
        prevent startup.
        """
        if session_settings.secret_key.get_secret_value() == DEFAULT_SESSION_SECRET:
            probe.insecure_session_secret()

        try:
            hostnames = await registry.all_hostnames()
            probe.tenant_registry_warmed(hostname_count=len(hostnames))
        except Exception as e:
            probe.tenant_registry_warmup_failed(error=e)

        probe.application_started(
            app_name=settings.app_name, version=__version__, debug=settings.debug
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Tenant resolution and cross-domain isolation for multi-tenant frontends",
        version=__version__,
        lifespan=tenant_edge_lifespan,
    )

    pipeline = build_pipeline(
        registry=registry,
        ability_store=ability_store or InMemoryTokenAbilityStore(),
        branding_store=branding_store or InMemoryBrandingStore(),
        principal_provider=principal_provider or InMemoryPrincipalProvider(),
        settings=settings,
        session_settings=session_settings,
        cors_settings=cors_settings,
        tenancy_settings=tenancy_settings,
    )
    app.add_middleware(TenantIsolationMiddleware, pipeline=pipeline)
    app.state.tenant_registry = registry

    @app.get("/health")
    def health():
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/context")
    def request_context(
        context: Annotated[RequestSecurityContext, Depends(get_security_context)],
    ) -> dict:
        """Describe how the calling request was resolved.

        The response is decorated with ``environment`` and ``branding``
        like any other JSON response.
        """
        frontend = context.frontend_origin
        return {
            "request_id": context.request_id,
            "tenant_id": context.tenant.tenant_id,
            "resolution_source": str(context.tenant.source),
            "frontend_origin": (
                {
                    "host": frontend.host,
                    "port": frontend.port,
                    "root_domain": frontend.root_domain,
                }
                if frontend
                else None
            ),
            "session_cookie": context.session_cookie_name,
            "cors_allowed_origin": context.cors.allowed_origin,
        }

    return app


app = create_app()
