"""Cached tenant registry.

Wraps a tenant source and keeps a short-lived snapshot of all active
tenants indexed by hostname and id. The snapshot is the only state shared
across requests, and it is read-only: requests never write to it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from shared_kernel.http.domain_parser import host_only, host_with_port
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.observability import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)
from tenancy.ports.repositories import ITenantSource


def normalize_host(value: str | None) -> str | None:
    """Normalize a stored domain to ``host`` or ``host:port``.

    Stored values are lowercased and trimmed. Full URLs are reduced to their
    host and explicit port. Empty values and URLs without a host yield None.
    """
    if not value:
        return None

    value = value.strip().lower()
    if not value:
        return None

    if value.startswith(("http://", "https://")):
        return host_with_port(value)

    return value


@dataclass(frozen=True)
class _RegistrySnapshot:
    hostnames: list[str]
    by_host: dict[str, Tenant]
    by_id: dict[int, Tenant]
    loaded_at: datetime


class CachedTenantRegistry:
    """Tenant registry backed by a tenant source and a TTL snapshot.

    ``all_hostnames`` returns the sorted, de-duplicated hostnames of every
    active tenant plus the configured development hosts. Lookups only ever
    return active tenants.
    """

    def __init__(
        self,
        source: ITenantSource,
        dev_hosts: list[str] | None = None,
        cache_ttl: timedelta = timedelta(minutes=5),
        probe: TenantRegistryProbe | None = None,
    ):
        """Initialize the registry.

        Args:
            source: Where tenants are loaded from.
            dev_hosts: Hosts always reported as stateful (local frontends).
            cache_ttl: How long a snapshot is reused. Zero disables caching.
            probe: Domain probe for observability.
        """
        self._source = source
        self._dev_hosts = [
            host for host in (normalize_host(h) for h in dev_hosts or []) if host
        ]
        self._cache_ttl = cache_ttl
        self._probe = probe or DefaultTenantRegistryProbe()

        self._snapshot: _RegistrySnapshot | None = None
        self._lock = asyncio.Lock()

    async def all_hostnames(self) -> list[str]:
        """Return every hostname of every active tenant."""
        snapshot = await self._get_snapshot()
        return list(snapshot.hostnames)

    async def find_by_hostname(self, host: str) -> Tenant | None:
        """Find the active tenant serving a bare hostname."""
        key = host_only(host).lower()
        if not key:
            return None
        snapshot = await self._get_snapshot()
        return snapshot.by_host.get(key)

    async def find_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Find an active tenant by id."""
        snapshot = await self._get_snapshot()
        return snapshot.by_id.get(tenant_id.value)

    async def refresh(self) -> None:
        """Drop the cached snapshot so the next lookup reloads tenants."""
        async with self._lock:
            self._snapshot = None

    async def _get_snapshot(self) -> _RegistrySnapshot:
        # Quick check without the lock
        if self._is_snapshot_valid():
            self._probe.registry_cache_hit()
            return self._snapshot  # type: ignore[return-value]

        async with self._lock:
            if self._is_snapshot_valid():
                self._probe.registry_cache_hit()
                return self._snapshot  # type: ignore[return-value]

            try:
                tenants = await self._source.load_tenants()
            except Exception as e:
                self._probe.registry_refresh_failed(error=e)
                if self._snapshot is not None:
                    return self._snapshot
                raise

            self._snapshot = self._build_snapshot(tenants)
            self._probe.registry_refreshed(
                tenant_count=len(self._snapshot.by_id),
                hostname_count=len(self._snapshot.hostnames),
            )
            return self._snapshot

    def _is_snapshot_valid(self) -> bool:
        if self._snapshot is None:
            return False
        now = datetime.now(tz=timezone.utc)
        return (now - self._snapshot.loaded_at) < self._cache_ttl

    def _build_snapshot(self, tenants: list[Tenant]) -> _RegistrySnapshot:
        active = sorted(
            (tenant for tenant in tenants if tenant.is_active),
            key=lambda tenant: tenant.id.value,
        )

        hostnames: set[str] = set(self._dev_hosts)
        by_host: dict[str, Tenant] = {}
        claims: dict[str, list[int]] = {}

        for tenant in active:
            for domain in tenant.all_domains():
                normalized = normalize_host(domain)
                if normalized is None:
                    continue
                hostnames.add(normalized)

                key = host_only(normalized)
                owners = claims.setdefault(key, [])
                if tenant.id.value not in owners:
                    owners.append(tenant.id.value)
                by_host.setdefault(key, tenant)

        for hostname, owners in claims.items():
            if len(owners) > 1:
                self._probe.duplicate_hostname(hostname=hostname, tenant_ids=owners)

        return _RegistrySnapshot(
            hostnames=sorted(hostnames),
            by_host=by_host,
            by_id={tenant.id.value: tenant for tenant in active},
            loaded_at=datetime.now(tz=timezone.utc),
        )
