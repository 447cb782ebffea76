"""Branding payload construction.

Turns a stored Branding into the ``branding`` object attached to JSON
responses. Values that end up interpreted by the browser (names, colors,
fonts, asset paths) are sanitized; custom CSS and JS are passed through
unless custom code sanitization is enabled.
"""

from __future__ import annotations

import html
import re
from typing import Any

from tenancy.domain.aggregates import Branding

_TAG = re.compile(r"<[^>]*>")
_PATH_DISALLOWED = re.compile(r"[^a-zA-Z0-9_\-./]")
_HEX_COLOR = re.compile(r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")
_NAMED_COLOR = re.compile(r"^[a-zA-Z]+$")
_FONT_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s,\-]")

_CSS_DANGEROUS = [
    re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"@import", re.IGNORECASE),
    re.compile(r"url\s*\(", re.IGNORECASE),
]


def sanitize_text(value: str | None) -> str | None:
    """Strip tags and HTML-escape a display string."""
    if not value:
        return None
    return html.escape(_TAG.sub("", value), quote=True)


def sanitize_path(value: str | None) -> str | None:
    """Remove traversal sequences and unexpected characters from a path."""
    if not value:
        return None
    value = _PATH_DISALLOWED.sub("", value.replace("\\", "/"))
    # Keep removing until nested sequences such as "....//" are gone
    previous = None
    while value != previous:
        previous = value
        value = value.replace("../", "")
    segments = [s for s in value.split("/") if s not in ("", ".", "..")]
    return "/".join(segments) or None


def sanitize_color(value: str | None) -> str | None:
    """Accept ``#rgb``, ``#rrggbb`` or a CSS color name, else None."""
    if not value:
        return None
    if _HEX_COLOR.match(value) or _NAMED_COLOR.match(value):
        return value
    return None


def sanitize_font_family(value: str | None) -> str | None:
    """Keep only alphanumerics, whitespace, commas and hyphens."""
    if not value:
        return None
    return _FONT_DISALLOWED.sub("", value)


def sanitize_css(value: str | None) -> str | None:
    """Remove script blocks and constructs that load or execute code."""
    if not value:
        return None
    for pattern in _CSS_DANGEROUS:
        value = pattern.sub("", value)
    return value


def asset_url(asset_base_url: str, path: str | None) -> str | None:
    """Absolute URL of a stored asset, or None without a usable path."""
    path = sanitize_path(path)
    if path is None:
        return None
    return f"{asset_base_url.rstrip('/')}/storage/{path}"


def build_branding_payload(
    branding: Branding,
    environment_id: int | None,
    asset_base_url: str,
    sanitize_custom_code: bool = False,
) -> dict[str, Any]:
    """Build the ``branding`` response object.

    Args:
        branding: The active branding to expose.
        environment_id: Resolved tenant id, None when the branding was
            found through the authenticated user instead.
        asset_base_url: Base URL for logo and favicon links.
        sanitize_custom_code: Sanitize custom CSS and drop custom JS.

    Returns:
        JSON-serializable branding payload.
    """
    if sanitize_custom_code:
        custom_css = sanitize_css(branding.custom_css)
        custom_js = None
    else:
        custom_css = branding.custom_css
        custom_js = branding.custom_js

    return {
        "company_name": sanitize_text(branding.company_name),
        "logo_url": asset_url(asset_base_url, branding.logo_path),
        "favicon_url": asset_url(asset_base_url, branding.favicon_path),
        "primary_color": sanitize_color(branding.primary_color),
        "secondary_color": sanitize_color(branding.secondary_color),
        "accent_color": sanitize_color(branding.accent_color),
        "font_family": sanitize_font_family(branding.font_family),
        "custom_css": custom_css,
        "custom_js": custom_js,
        "environment_id": environment_id,
    }
