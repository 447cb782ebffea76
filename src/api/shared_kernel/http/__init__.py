"""HTTP primitives shared across bounded contexts."""

from shared_kernel.http.cookies import CookieSpec, SameSite
from shared_kernel.http.domain_parser import (
    FrontendOrigin,
    detect_frontend_origin,
    host_only,
    host_with_port,
    is_ip_literal,
    parse_host,
    root_domain,
    slugify,
)

__all__ = [
    "CookieSpec",
    "FrontendOrigin",
    "SameSite",
    "detect_frontend_origin",
    "host_only",
    "host_with_port",
    "is_ip_literal",
    "parse_host",
    "root_domain",
    "slugify",
]
