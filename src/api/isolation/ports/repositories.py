"""Collaborator protocols (ports) for the isolation bounded context."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IStatefulHostSource(Protocol):
    """Source of the hosts trusted for credentialed cross-origin requests.

    The tenant registry satisfies this protocol structurally.
    """

    async def all_hostnames(self) -> list[str]:
        """Return every ``host`` or ``host:port`` of every active tenant."""
        ...


@runtime_checkable
class ISessionStore(Protocol):
    """Loads and persists session data under a given cookie name."""

    def load(self, cookie_value: str | None) -> dict[str, Any]:
        """Decode a session cookie value, empty session if missing or invalid."""
        ...

    def dump(self, session: dict[str, Any]) -> str:
        """Encode session data into a cookie value."""
        ...
