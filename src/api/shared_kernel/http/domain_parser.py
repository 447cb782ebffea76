"""Hostname parsing shared by every stage of the tenant isolation pipeline.

All components that need domain semantics (environment resolution, CORS,
session cookie naming, CSRF cookie scoping) go through these functions so
that they never disagree about what "the frontend host" or "the root
domain" of a request is.

Every function here is pure: no I/O, no logging, no exceptions for
malformed input. Unparseable values come back as None.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

FRONTEND_DOMAIN_HEADER = "X-Frontend-Domain"
ORIGIN_HEADER = "Origin"
REFERER_HEADER = "Referer"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class FrontendOrigin:
    """The browser-facing host a request claims to originate from.

    Attributes:
        host: Lowercased hostname without port.
        port: Explicit port, if one was given.
        root_domain: Last two DNS labels of the host, or None for
            localhost, IP literals and single-label hosts.
    """

    host: str
    port: int | None = None
    root_domain: str | None = None

    @property
    def host_with_port(self) -> str:
        """Host in the same ``host[:port]`` form the tenant registry uses."""
        if self.port is None:
            return self.host
        return f"{self.host}:{self.port}"

    @classmethod
    def from_host(cls, host: str, port: int | None = None) -> FrontendOrigin:
        """Build an origin from a bare host, deriving its root domain."""
        host = host.lower()
        return cls(host=host, port=port, root_domain=root_domain(host))


def host_only(value: str) -> str:
    """Strip the port from a ``host[:port]`` header value.

    >>> host_only("learning.csl-brands.com:8443")
    'learning.csl-brands.com'
    """
    return value.strip().split(":")[0]


def parse_host(url: str) -> str | None:
    """Return the lowercased hostname of a URL, or None if it has none."""
    try:
        return urlsplit(url.strip()).hostname or None
    except ValueError:
        return None


def host_with_port(url: str) -> str | None:
    """Return ``host`` or ``host:port`` for a URL.

    The host is lowercased; the port is kept only when the URL spells it
    out. Returns None when the value does not parse as a URL with a host.

    >>> host_with_port("https://App.Tenant.com:8443/path")
    'app.tenant.com:8443'
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None

    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is None:
        return host
    return f"{host}:{port}"


def is_ip_literal(host: str) -> bool:
    """Whether host is an IPv4 or IPv6 address (brackets allowed)."""
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def root_domain(host: str) -> str | None:
    """Return the last two DNS labels of a host.

    Used as the shared scope for cookies that must be readable across
    subdomains. Returns None for localhost, IP literals and hosts with
    fewer than two labels, so callers fall back to host-only scope.

    >>> root_domain("learning.csl-brands.com")
    'csl-brands.com'
    """
    host = host.strip().lower().rstrip(".")
    if not host or host == "localhost" or is_ip_literal(host):
        return None

    labels = host.split(".")
    if len(labels) < 2 or not all(labels[-2:]):
        return None

    return ".".join(labels[-2:])


def slugify(value: str, separator: str = "_") -> str:
    """Lowercase value and collapse every non-alphanumeric run to separator.

    Internationalized hostnames are converted to their ASCII (punycode) form
    first so that non-Latin labels are not dropped.

    >>> slugify("learning.csl-brands.com")
    'learning_csl_brands_com'
    """
    try:
        value = value.encode("idna").decode("ascii")
    except UnicodeError:
        pass
    return _NON_ALPHANUMERIC.sub(separator, value.lower())


def _origin_from_declared_host(value: str) -> FrontendOrigin | None:
    if value.strip().startswith("["):
        # Bracketed IPv6 literal, the port follows the closing bracket
        return _origin_from_url(f"//{value.strip()}")

    host = host_only(value)
    if not host:
        return None

    port: int | None = None
    _, _, raw_port = value.strip().partition(":")
    if raw_port.isdigit():
        port = int(raw_port)

    return FrontendOrigin.from_host(host, port)


def _origin_from_url(value: str) -> FrontendOrigin | None:
    try:
        parts = urlsplit(value.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None

    if not host:
        return None
    return FrontendOrigin.from_host(host, port)


def detect_frontend_origin(headers: Mapping[str, str]) -> FrontendOrigin | None:
    """Derive the frontend origin of a request from its headers.

    Priority: ``X-Frontend-Domain`` (explicit host, may carry a port), then
    ``Origin``, then ``Referer``. A header that is present but yields no
    host is skipped in favor of the next one.

    Args:
        headers: Request headers. Starlette ``Headers`` are matched
            case-insensitively; plain mappings must use the canonical names.

    Returns:
        The detected FrontendOrigin, or None if no header yields a host.
    """
    declared = headers.get(FRONTEND_DOMAIN_HEADER)
    if declared:
        origin = _origin_from_declared_host(declared)
        if origin is not None:
            return origin

    for name in (ORIGIN_HEADER, REFERER_HEADER):
        value = headers.get(name)
        if value:
            origin = _origin_from_url(value)
            if origin is not None:
                return origin

    return None
