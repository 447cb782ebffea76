"""Signed-cookie session storage.

Session data lives entirely in the cookie: a base64 encoded JSON payload
signed with an itsdangerous ``TimestampSigner``. Nothing is persisted
server side, so an aborted request leaves no state behind.
"""

from __future__ import annotations

import json
import secrets
from base64 import b64decode, b64encode
from binascii import Error as BinasciiError
from typing import Any

import itsdangerous
from itsdangerous.exc import BadSignature

from isolation.domain.value_objects import CSRF_SESSION_KEY

CSRF_TOKEN_BYTES = 30


def ensure_csrf_token(session: dict[str, Any]) -> str:
    """Return the session's CSRF token, generating one if it has none.

    Generated tokens are 40 URL-safe characters.
    """
    token = session.get(CSRF_SESSION_KEY)
    if not isinstance(token, str) or not token:
        token = secrets.token_urlsafe(CSRF_TOKEN_BYTES)
        session[CSRF_SESSION_KEY] = token
    return token


class SignedCookieSessionStore:
    """ISessionStore keeping signed session data in the cookie itself."""

    def __init__(self, secret_key: str, max_age: int):
        """Initialize the store.

        Args:
            secret_key: Signing key.
            max_age: Seconds after which a signed cookie is rejected.
        """
        self._signer = itsdangerous.TimestampSigner(secret_key)
        self._max_age = max_age

    def load(self, cookie_value: str | None) -> dict[str, Any]:
        """Decode a session cookie value.

        Missing, tampered, expired and malformed values all yield an empty
        session.
        """
        if not cookie_value:
            return {}

        try:
            payload = self._signer.unsign(
                cookie_value.encode("utf-8"), max_age=self._max_age
            )
            data = json.loads(b64decode(payload))
        except (BadSignature, BinasciiError, ValueError):
            return {}

        if not isinstance(data, dict):
            return {}
        return data

    def dump(self, session: dict[str, Any]) -> str:
        """Encode and sign session data."""
        payload = b64encode(json.dumps(session).encode("utf-8"))
        return self._signer.sign(payload).decode("utf-8")
