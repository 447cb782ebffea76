"""The two phases of the tenant isolation pipeline.

``PreSessionConfigure`` runs before the session is loaded and produces the
immutable ``RequestSecurityContext``. ``PostResponseFinalize`` steps run
after the handler, in a fixed order, on the outgoing response. The
``TenantIsolationPipeline`` ties both together so that no step can run out
of order.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from starlette.requests import HTTPConnection

from isolation.application.cors_policy import CorsPolicyEngine
from isolation.application.csrf_cookie import CsrfCookieSynchronizer
from isolation.application.observability import (
    CookieProbe,
    CorsPolicyProbe,
    DefaultCookieProbe,
    DefaultCorsPolicyProbe,
)
from isolation.application.session_namespace import SessionCookieNamespacer
from isolation.domain.value_objects import CSRF_SESSION_KEY, CorsPolicy
from isolation.infrastructure.session_store import ensure_csrf_token
from isolation.ports.repositories import ISessionStore
from pipeline.context import OutgoingResponse, RequestSecurityContext
from pipeline.observability import DefaultPipelineProbe, PipelineProbe
from shared_kernel.http.domain_parser import (
    FRONTEND_DOMAIN_HEADER,
    ORIGIN_HEADER,
    REFERER_HEADER,
    detect_frontend_origin,
)
from shared_kernel.middleware.tenant_context import ResolvedTenantContext
from shared_kernel.observability_context import ObservationContext
from tenancy.application.environment_resolver import EnvironmentResolver
from tenancy.application.observability import (
    DefaultEnvironmentResolverProbe,
    DefaultResponseAugmenterProbe,
    EnvironmentResolverProbe,
    ResponseAugmenterProbe,
)
from tenancy.application.response_augmenter import ResponseAugmenter
from tenancy.domain.value_objects import Principal
from tenancy.ports.repositories import IPrincipalProvider

REQUEST_ID_HEADER = "X-Request-ID"

Session = dict[str, Any]


class PreSessionConfigure(Protocol):
    """Decides everything about a request that must precede session load."""

    async def configure(self, connection: HTTPConnection) -> RequestSecurityContext:
        ...


class PostResponseFinalize(Protocol):
    """One step applied to the outgoing response after the handler ran."""

    async def finalize(
        self,
        context: RequestSecurityContext,
        session: Session,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        ...


def bearer_token(connection: HTTPConnection) -> str | None:
    """Token of an ``Authorization: Bearer`` header, if present."""
    authorization = connection.headers.get("authorization")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SecurityContextConfigurer:
    """Default pre-session phase.

    Detects the frontend origin, authenticates the bearer token, resolves
    the tenant, computes the CORS policy and picks the session cookie name.
    """

    def __init__(
        self,
        resolver: EnvironmentResolver,
        cors_engine: CorsPolicyEngine,
        namespacer: SessionCookieNamespacer,
        principal_provider: IPrincipalProvider | None = None,
        probe: PipelineProbe | None = None,
        resolver_probe: EnvironmentResolverProbe | None = None,
        cors_probe: CorsPolicyProbe | None = None,
        cookie_probe: CookieProbe | None = None,
    ):
        self._resolver = resolver
        self._cors_engine = cors_engine
        self._namespacer = namespacer
        self._principal_provider = principal_provider
        self._probe = probe or DefaultPipelineProbe()
        self._resolver_probe = resolver_probe or DefaultEnvironmentResolverProbe()
        self._cors_probe = cors_probe or DefaultCorsPolicyProbe()
        self._cookie_probe = cookie_probe or DefaultCookieProbe()

    async def configure(self, connection: HTTPConnection) -> RequestSecurityContext:
        headers = connection.headers
        request_id = headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        origin = headers.get(ORIGIN_HEADER)
        referer = headers.get(REFERER_HEADER)
        frontend = detect_frontend_origin(headers)

        observation = ObservationContext(
            request_id=request_id,
            frontend_host=frontend.host if frontend else None,
        )
        probe = self._probe.with_context(observation)

        token = bearer_token(connection)
        principal = await self._authenticate(token, probe)
        if principal is not None:
            observation = ObservationContext(
                request_id=request_id,
                user_id=principal.user_id,
                frontend_host=observation.frontend_host,
            )

        tenant = await self._resolver.resolve_context(
            principal=principal,
            bearer_token=token,
            frontend_domain=headers.get(FRONTEND_DOMAIN_HEADER),
            origin=origin,
            referer=referer,
            probe=self._resolver_probe.with_context(observation),
        )
        observation = observation.with_tenant(tenant.tenant_id)

        cors = await self._cors_engine.configure(
            origin, probe=self._cors_probe.with_context(observation)
        )
        cookie_name = self._namespacer.cookie_name_for(
            frontend, probe=self._cookie_probe.with_context(observation)
        )

        probe.request_configured(
            tenant_id=tenant.tenant_id,
            source=str(tenant.source),
            session_cookie=cookie_name,
        )
        return RequestSecurityContext(
            tenant=tenant,
            frontend_origin=frontend,
            cors=cors,
            session_cookie_name=cookie_name,
            principal=principal,
            request_id=request_id,
            origin=origin,
            referer=referer,
        )

    def fallback(self, connection: HTTPConnection) -> RequestSecurityContext:
        """Narrowest context, used when configuration itself failed."""
        headers = connection.headers
        return RequestSecurityContext(
            tenant=ResolvedTenantContext.unresolved(),
            frontend_origin=None,
            cors=CorsPolicy.deny_all(),
            session_cookie_name=self._namespacer.default_cookie_name,
            request_id=headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex,
            origin=headers.get(ORIGIN_HEADER),
            referer=headers.get(REFERER_HEADER),
        )

    async def _authenticate(
        self, token: str | None, probe: PipelineProbe
    ) -> Principal | None:
        if token is None or self._principal_provider is None:
            return None
        try:
            return await self._principal_provider.from_bearer_token(token)
        except Exception as e:
            probe.principal_lookup_failed(error=e)
            return None


class SessionCookieFinalizer:
    """Writes the session cookie under the request's namespaced name."""

    def __init__(self, namespacer: SessionCookieNamespacer, store: ISessionStore):
        self._namespacer = namespacer
        self._store = store

    async def finalize(
        self,
        context: RequestSecurityContext,
        session: Session,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        spec = self._namespacer.session_cookie(
            name=context.session_cookie_name,
            value=self._store.dump(session) if session else "",
            isolated=context.is_isolated,
        )
        if not session:
            spec = spec.expired()
        response.put_cookie(spec)
        return response


class CsrfCookieFinalizer:
    """Emits exactly one ``XSRF-TOKEN`` cookie scoped to the root domain."""

    def __init__(
        self,
        synchronizer: CsrfCookieSynchronizer,
        probe: CookieProbe | None = None,
    ):
        self._synchronizer = synchronizer
        self._probe = probe or DefaultCookieProbe()

    async def finalize(
        self,
        context: RequestSecurityContext,
        session: Session,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        token = session.get(CSRF_SESSION_KEY)
        spec = self._synchronizer.synchronize(
            response.get_all("set-cookie"),
            session_token=token if isinstance(token, str) else None,
            frontend=context.frontend_origin,
            probe=self._probe.with_context(context.observation_context()),
        )
        if spec is not None:
            response.put_cookie(spec)
        return response


class CorsHeadersFinalizer:
    """Applies the request's CORS policy to the response headers."""

    def __init__(self, engine: CorsPolicyEngine):
        self._engine = engine

    async def finalize(
        self,
        context: RequestSecurityContext,
        session: Session,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        for name, value in self._engine.response_headers(context.cors, context.origin):
            if name == "vary":
                response.add_vary(value)
            else:
                response.set(name, value)
        return response


class ResponseAugmentationFinalizer:
    """Attaches environment and branding data to buffered JSON bodies."""

    def __init__(
        self,
        augmenter: ResponseAugmenter,
        probe: ResponseAugmenterProbe | None = None,
    ):
        self._augmenter = augmenter
        self._probe = probe or DefaultResponseAugmenterProbe()

    async def finalize(
        self,
        context: RequestSecurityContext,
        session: Session,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        if response.body is None:
            return response

        body = await self._augmenter.augment(
            response.body,
            response.get("content-type"),
            tenant=context.tenant,
            principal=context.principal,
            frontend_origin=context.frontend_origin,
            origin=context.origin,
            referer=context.referer,
            probe=self._probe.with_context(context.observation_context()),
        )
        if body is not None:
            response.replace_body(body)
        return response


@dataclass(frozen=True)
class PreparedRequest:
    """A configured request with its session loaded."""

    context: RequestSecurityContext
    session: Session


Finalize = Callable[[OutgoingResponse], Awaitable[OutgoingResponse]]
Handler = Callable[[PreparedRequest, Finalize], Awaitable[None]]


class TenantIsolationPipeline:
    """Runs configure, session load, handler and finalizers in that order.

    No step ever raises to the caller: failures are reported through the
    probe and the step is skipped, falling back to the narrowest scope.
    """

    def __init__(
        self,
        configurer: SecurityContextConfigurer,
        session_store: ISessionStore,
        finalizers: Sequence[PostResponseFinalize],
        cors_engine: CorsPolicyEngine,
        probe: PipelineProbe | None = None,
    ):
        """Initialize the pipeline.

        Args:
            configurer: Pre-session phase.
            session_store: Loads the session under the configured name.
            finalizers: Post-response steps, applied in the given order.
            cors_engine: Renders preflight answers.
            probe: Domain probe for observability.
        """
        self._configurer = configurer
        self._session_store = session_store
        self._finalizers = tuple(finalizers)
        self._cors_engine = cors_engine
        self._probe = probe or DefaultPipelineProbe()

    async def configure(self, connection: HTTPConnection) -> RequestSecurityContext:
        """Run the pre-session phase."""
        try:
            return await self._configurer.configure(connection)
        except Exception as e:
            self._probe.pipeline_step_failed(step="configure", error=e)
            return self._configurer.fallback(connection)

    def load_session(
        self, connection: HTTPConnection, context: RequestSecurityContext
    ) -> Session:
        """Load the session stored under the context's cookie name.

        The session always carries a CSRF token afterwards.
        """
        probe = self._probe.with_context(context.observation_context())
        cookie_value = connection.cookies.get(context.session_cookie_name)
        try:
            session = self._session_store.load(cookie_value)
        except Exception as e:
            probe.pipeline_step_failed(step="session_load", error=e)
            session = {}

        if cookie_value and not session:
            probe.session_cookie_rejected(cookie_name=context.session_cookie_name)

        ensure_csrf_token(session)
        return session

    async def finalize(
        self,
        prepared: PreparedRequest,
        response: OutgoingResponse,
    ) -> OutgoingResponse:
        """Apply every post-response step, then the request id header."""
        probe = self._probe.with_context(prepared.context.observation_context())
        for finalizer in self._finalizers:
            try:
                response = await finalizer.finalize(
                    prepared.context, prepared.session, response
                )
            except Exception as e:
                probe.pipeline_step_failed(step=type(finalizer).__name__, error=e)

        response.set(REQUEST_ID_HEADER, prepared.context.request_id)
        return response

    async def preflight(self, connection: HTTPConnection) -> OutgoingResponse:
        """Answer a CORS preflight request. Always ``204``."""
        context = await self.configure(connection)
        headers = self._cors_engine.preflight_headers(
            context.cors,
            context.origin,
            connection.headers.get("access-control-request-headers"),
        )
        self._probe.with_context(context.observation_context()).preflight_answered(
            origin=context.origin,
            allowed=context.cors.allowed_origin is not None,
        )
        response = OutgoingResponse(status=204, headers=list(headers))
        response.set(REQUEST_ID_HEADER, context.request_id)
        return response

    async def run(self, connection: HTTPConnection, handler: Handler) -> None:
        """Prepare the request and hand it to handler.

        handler receives the prepared request and the finalize callback,
        which it must apply to the response before sending its headers.
        """
        context = await self.configure(connection)
        session = self.load_session(connection, context)
        prepared = PreparedRequest(context=context, session=session)

        async def finalize(response: OutgoingResponse) -> OutgoingResponse:
            return await self.finalize(prepared, response)

        await handler(prepared, finalize)
