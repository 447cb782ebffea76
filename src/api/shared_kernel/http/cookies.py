"""Declarative cookie state.

A ``CookieSpec`` describes the desired final state of one cookie. The
pipeline computes at most one spec per cookie name and renders it to a
single ``Set-Cookie`` header, so a response never carries two conflicting
headers for the same name.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from http.cookies import CookieError, SimpleCookie
from typing import Literal

SameSite = Literal["lax", "strict", "none"]


@dataclass(frozen=True)
class CookieSpec:
    """Desired state of a single cookie.

    Attributes:
        name: Cookie name.
        value: Cookie value.
        domain: Domain attribute; None means host-only scope.
        path: Path attribute.
        max_age: Max-Age in seconds, None for no Max-Age attribute.
        expires: Raw Expires attribute, preserved verbatim when rewriting.
        secure: Secure flag.
        http_only: HttpOnly flag.
        same_site: SameSite attribute, None to omit it.
    """

    name: str
    value: str
    domain: str | None = None
    path: str = "/"
    max_age: int | None = None
    expires: str | None = None
    secure: bool = False
    http_only: bool = False
    same_site: SameSite | None = None

    def render(self) -> str:
        """Render the cookie as a ``Set-Cookie`` header value."""
        cookie: SimpleCookie = SimpleCookie()
        cookie[self.name] = self.value
        morsel = cookie[self.name]
        morsel["path"] = self.path
        if self.domain is not None:
            morsel["domain"] = self.domain
        if self.max_age is not None:
            morsel["max-age"] = self.max_age
        if self.expires is not None:
            morsel["expires"] = self.expires
        if self.secure:
            morsel["secure"] = True
        if self.http_only:
            morsel["httponly"] = True
        if self.same_site is not None:
            morsel["samesite"] = self.same_site
        return cookie.output(header="").strip()

    def expired(self) -> CookieSpec:
        """Spec that makes the browser delete this cookie."""
        return replace(
            self,
            value="",
            max_age=0,
            expires="Thu, 01 Jan 1970 00:00:00 GMT",
        )


def parse_set_cookie(header_value: str) -> CookieSpec | None:
    """Parse a ``Set-Cookie`` header value into a CookieSpec.

    Returns None when the value cannot be parsed.
    """
    cookie: SimpleCookie = SimpleCookie()
    try:
        cookie.load(header_value)
    except CookieError:
        return None

    if len(cookie) != 1:
        return None

    name, morsel = next(iter(cookie.items()))

    max_age: int | None = None
    if morsel["max-age"]:
        try:
            max_age = int(morsel["max-age"])
        except ValueError:
            max_age = None

    same_site = str(morsel["samesite"]).lower() or None
    if same_site not in ("lax", "strict", "none"):
        same_site = None

    return CookieSpec(
        name=name,
        value=morsel.value,
        domain=morsel["domain"] or None,
        path=morsel["path"] or "/",
        max_age=max_age,
        expires=morsel["expires"] or None,
        secure=bool(morsel["secure"]),
        http_only=bool(morsel["httponly"]),
        same_site=same_site,  # type: ignore[arg-type]
    )


def cookie_name(header_value: str) -> str:
    """Name of the cookie set by a ``Set-Cookie`` header value."""
    return header_value.split("=", 1)[0].strip()
