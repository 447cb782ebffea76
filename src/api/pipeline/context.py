"""Per-request state threaded through the tenant isolation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from isolation.domain.value_objects import CorsPolicy
from shared_kernel.http.cookies import CookieSpec
from shared_kernel.http.domain_parser import FrontendOrigin
from shared_kernel.middleware.tenant_context import ResolvedTenantContext
from shared_kernel.observability_context import ObservationContext
from tenancy.domain.value_objects import Principal


@dataclass(frozen=True)
class RequestSecurityContext:
    """Everything the pre-session phase decided about a request.

    Built once before the session is loaded and never modified afterwards,
    so the session cookie name, CORS policy and tenant cannot change while
    the handler runs.

    Attributes:
        tenant: Tenant resolution outcome.
        frontend_origin: Frontend origin detected from the request headers.
        cors: CORS policy for the request's Origin.
        session_cookie_name: Name the session cookie is read and written under.
        principal: Authenticated caller, if any.
        request_id: Identifier echoed in ``X-Request-ID``.
        origin: Raw ``Origin`` header.
        referer: Raw ``Referer`` header.
    """

    tenant: ResolvedTenantContext
    frontend_origin: FrontendOrigin | None
    cors: CorsPolicy
    session_cookie_name: str
    principal: Principal | None = None
    request_id: str = ""
    origin: str | None = None
    referer: str | None = None

    @property
    def is_isolated(self) -> bool:
        """Whether the session cookie is namespaced to a frontend host."""
        return self.frontend_origin is not None

    def observation_context(self) -> ObservationContext:
        """Observation context carrying this request's identifiers."""
        return ObservationContext(
            request_id=self.request_id or None,
            user_id=self.principal.user_id if self.principal else None,
            tenant_id=self.tenant.tenant_id,
            frontend_host=self.frontend_origin.host if self.frontend_origin else None,
        )


@dataclass
class OutgoingResponse:
    """Mutable view of a response the finalizers work on.

    Header names are lowercase. ``body`` is None for streamed responses,
    whose body is never seen by the pipeline.
    """

    status: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None

    @classmethod
    def from_asgi(
        cls, status: int, raw_headers: list[tuple[bytes, bytes]]
    ) -> OutgoingResponse:
        headers = [
            (name.decode("latin-1").lower(), value.decode("latin-1"))
            for name, value in raw_headers
        ]
        return cls(status=status, headers=headers)

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers
        ]

    def get(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers:
            if key == name:
                return value
        return None

    def get_all(self, name: str) -> list[str]:
        name = name.lower()
        return [value for key, value in self.headers if key == name]

    def set(self, name: str, value: str) -> None:
        """Replace every header called name with a single one."""
        name = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k != name]
        self.headers.append((name, value))

    def append(self, name: str, value: str) -> None:
        self.headers.append((name.lower(), value))

    def add_vary(self, value: str) -> None:
        """Add a token to ``Vary`` without duplicating it."""
        current = self.get("vary")
        if current is None:
            self.set("vary", value)
            return
        tokens = [token.strip() for token in current.split(",")]
        if "*" in tokens or value.lower() in (token.lower() for token in tokens):
            return
        self.set("vary", f"{current}, {value}")

    def put_cookie(self, spec: CookieSpec) -> None:
        """Make spec the only ``Set-Cookie`` header for its cookie name."""
        prefix = f"{spec.name}="
        self.headers = [
            (k, v)
            for k, v in self.headers
            if not (k == "set-cookie" and v.strip().startswith(prefix))
        ]
        self.headers.append(("set-cookie", spec.render()))

    def replace_body(self, body: bytes) -> None:
        """Swap the body and recompute ``Content-Length``."""
        self.body = body
        self.set("content-length", str(len(body)))
