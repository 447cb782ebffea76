"""Ports for the isolation context."""

from isolation.ports.repositories import ISessionStore, IStatefulHostSource

__all__ = [
    "ISessionStore",
    "IStatefulHostSource",
]
