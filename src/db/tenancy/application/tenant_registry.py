"""Tenant allow-list cache.

The request path validates tenant names against a comma-joined list held in
the cache store. TenantInfo is the source of truth; this registry keeps the
cached copy in step with it. The two are not updated transactionally, so
readers must tolerate a briefly stale list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tenancy.domain.value_objects import join_tenant_list, parse_tenant_list
from tenancy.observability import DefaultTenantRegistryProbe, TenantRegistryProbe

if TYPE_CHECKING:
    from infrastructure.cache.store import CacheStore
    from tenancy.infrastructure.tenant_info_repository import TenantInfoRepository


class TenantRegistry:
    """Maintains the cached tenant allow-list."""

    def __init__(
        self,
        cache: CacheStore,
        cache_key: str = "tenants",
        probe: TenantRegistryProbe | None = None,
    ) -> None:
        self._cache = cache
        self._cache_key = cache_key
        self._probe = probe or DefaultTenantRegistryProbe()

    async def cached_tenants(self) -> list[str]:
        """Return the tenant names currently in the cache."""
        return parse_tenant_list(await self._cache.get(self._cache_key))

    async def is_allowed(self, tenant: str) -> bool:
        """Check a tenant name against the cached allow-list."""
        return tenant in await self.cached_tenants()

    async def replace(self, tenants: list[str]) -> None:
        """Overwrite the cached list; an empty list removes the key."""
        if not tenants:
            await self._cache.delete(self._cache_key)
            self._probe.tenant_list_cleared()
            return
        await self._cache.set(self._cache_key, join_tenant_list(tenants))
        self._probe.tenant_list_cached(tenants)

    async def add(self, tenant: str) -> None:
        """Append a tenant to the cached list if missing."""
        tenants = await self.cached_tenants()
        if tenant not in tenants:
            await self.replace([*tenants, tenant])

    async def remove(self, tenant: str) -> None:
        """Remove a tenant from the cached list."""
        tenants = await self.cached_tenants()
        if tenant in tenants:
            await self.replace([name for name in tenants if name != tenant])

    async def sync(self, repository: TenantInfoRepository) -> list[str]:
        """Rewrite the cached list from TenantInfo and return it."""
        tenants = await repository.schema_names()
        await self.replace(tenants)
        return tenants
