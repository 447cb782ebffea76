"""ASGI middleware running the tenant isolation pipeline.

JSON responses are buffered so their body can be augmented. Every other
response streams through untouched; only its headers are finalized.
"""

from __future__ import annotations

from typing import Any

import structlog
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pipeline.context import OutgoingResponse
from pipeline.phases import Finalize, PreparedRequest, TenantIsolationPipeline
from tenancy.application.response_augmenter import is_json_content_type

SECURITY_CONTEXT_STATE_KEY = "security_context"
TENANT_CONTEXT_STATE_KEY = "tenant_context"


def is_preflight(scope: Scope, connection: HTTPConnection) -> bool:
    return (
        scope.get("method") == "OPTIONS"
        and "access-control-request-method" in connection.headers
    )


def _should_buffer(response: OutgoingResponse) -> bool:
    # Compressed bodies cannot be parsed
    if response.get("content-encoding"):
        return False
    return is_json_content_type(response.get("content-type"))


class TenantIsolationMiddleware:
    """Pure ASGI middleware wrapping every HTTP request in the pipeline."""

    def __init__(self, app: ASGIApp, pipeline: TenantIsolationPipeline):
        self.app = app
        self.pipeline = pipeline

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)

        if is_preflight(scope, connection):
            response = await self.pipeline.preflight(connection)
            await send(
                {
                    "type": "http.response.start",
                    "status": response.status,
                    "headers": response.raw_headers(),
                }
            )
            await send({"type": "http.response.body", "body": b""})
            return

        async def handler(prepared: PreparedRequest, finalize: Finalize) -> None:
            context = prepared.context
            scope["session"] = prepared.session
            state = scope.setdefault("state", {})
            state[SECURITY_CONTEXT_STATE_KEY] = context
            state[TENANT_CONTEXT_STATE_KEY] = context.tenant

            with structlog.contextvars.bound_contextvars(
                request_id=context.request_id,
                tenant_id=context.tenant.tenant_id,
                frontend_host=(
                    context.frontend_origin.host if context.frontend_origin else None
                ),
            ):
                await self.app(scope, receive, _ResponseFinalizer(send, finalize))

        await self.pipeline.run(connection, handler)


class _ResponseFinalizer:
    """ASGI send wrapper applying the finalize phase before headers go out."""

    def __init__(self, send: Send, finalize: Finalize):
        self._send = send
        self._finalize = finalize
        self._response: OutgoingResponse | None = None
        self._start: Message | None = None
        self._buffering = False
        self._chunks: list[bytes] = []

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self._start = message
            self._response = OutgoingResponse.from_asgi(
                message["status"], list(message.get("headers", []))
            )
            self._buffering = _should_buffer(self._response)
            if not self._buffering:
                await self._send_start(await self._finalize(self._response))
            return

        if message["type"] == "http.response.body" and self._buffering:
            self._chunks.append(message.get("body", b""))
            if message.get("more_body", False):
                return

            assert self._response is not None
            self._response.body = b"".join(self._chunks)
            response = await self._finalize(self._response)
            await self._send_start(response)
            await self._send({"type": "http.response.body", "body": response.body or b""})
            return

        await self._send(message)

    async def _send_start(self, response: OutgoingResponse) -> None:
        assert self._start is not None
        start: dict[str, Any] = dict(self._start)
        start["status"] = response.status
        start["headers"] = response.raw_headers()
        await self._send(start)
