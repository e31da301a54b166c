"""Materialise tenant schemas from fixtures or from the Template registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from infrastructure.database.catalog import create_schema, drop_schema
from migrations.domain.model_list import ModelListEntry
from migrations.infrastructure.template_repository import TemplateRepository
from migrations.observability import DefaultSeedProbe, SeedProbe
from migrations.ports.exceptions import InvalidUsageError
from tenancy.infrastructure.tenant_info_repository import TenantInfoRepository

if TYPE_CHECKING:
    from infrastructure.cache.store import CacheStore
    from infrastructure.database.transaction import TransactionHandle
    from migrations.application.migration_helper import MigrationHelper
    from migrations.application.session import ToolchainSession
    from migrations.infrastructure.table_handle import TableHandle
    from tenancy.domain.value_objects import TenantInfo


class SeedHelper:
    """Creates and fills the tables of one tenant at a time.

    The table list is read once per tenant: from ``models/list.json`` and
    the definition files, or from the Template registry when
    ``use_registry`` is set (for tenants created after the bootstrap
    migration). With ``use_registry=None`` the registry is used whenever
    the Template table exists.
    """

    def __init__(
        self,
        session: ToolchainSession,
        migrations: MigrationHelper,
        cache: CacheStore | None = None,
        use_registry: bool | None = False,
        probe: SeedProbe | None = None,
    ) -> None:
        self._session = session
        self._migrations = migrations
        self._cache = cache
        self._use_registry = use_registry
        self._probe = probe or DefaultSeedProbe()
        self._tenant: str | None = None
        self._models: list[tuple[ModelListEntry, dict[str, Any]]] | None = None
        self._handles: dict[str, TableHandle] = {}

    @property
    def tenant(self) -> str:
        if self._tenant is None:
            raise InvalidUsageError("No tenant set; call set_tenant() first")
        return self._tenant

    def set_tenant(self, tenant: str) -> None:
        """Switch to another tenant, forgetting loaded models and handles."""
        self._tenant = tenant
        self._models = None
        self._handles = {}

    async def _model_list(
        self, transaction: TransactionHandle
    ) -> list[tuple[ModelListEntry, dict[str, Any]]]:
        if self._models is None:
            templates = TemplateRepository(transaction)
            use_registry = self._use_registry
            if use_registry is None:
                use_registry = await templates.exists()
            if use_registry:
                records = await templates.list_ordered()
                self._models = [
                    (record.to_model_list_entry(), record.definition)
                    for record in records
                ]
            else:
                fixtures = self._session.fixtures
                self._models = [
                    (entry, fixtures.read_definition(entry.model_name))
                    for entry in fixtures.read_model_list()
                ]
        return self._models

    async def setup_tables(self, transaction: TransactionHandle) -> list[TableHandle]:
        """Create every table of the current tenant in apply order."""
        tenant = self.tenant
        handles = []
        for entry, definition in await self._model_list(transaction):
            handle = await self._migrations.define_table(
                transaction, entry.table_name, definition, tenant, entry.timestamps
            )
            self._handles[entry.table_name] = handle
            handles.append(handle)
        self._probe.tables_set_up(tenant, len(handles))
        return handles

    async def populate_tables(self, transaction: TransactionHandle) -> int:
        """Insert the current tenant's fixture rows; return the row count.

        Tables without a fixture file are left empty.
        """
        tenant = self.tenant
        total = 0
        for entry, definition in await self._model_list(transaction):
            rows = self._session.fixtures.read_tenant_rows(tenant, entry.model_name)
            if rows is None:
                self._probe.fixture_missing(tenant, entry.model_name)
                continue
            handle = self._handles.get(entry.table_name)
            if handle is None:
                handle = await self._migrations.define_table(
                    transaction, entry.table_name, definition, tenant, entry.timestamps
                )
                self._handles[entry.table_name] = handle
            count = await handle.bulk_create(rows)
            self._probe.table_populated(tenant, entry.table_name, count)
            total += count
        return total

    def _require_cache(self) -> CacheStore:
        if self._cache is None:
            raise InvalidUsageError("SeedHelper was created without a cache store")
        return self._cache

    async def get_cache_value(self, key: str) -> str | None:
        return await self._require_cache().get(key)

    async def set_cache_value(self, key: str, value: str) -> None:
        await self._require_cache().set(key, value)

    async def delete_cache_value(self, key: str) -> None:
        await self._require_cache().delete(key)

    async def create_tenant(
        self, transaction: TransactionHandle, tenant: TenantInfo
    ) -> None:
        """Create, set up and populate a tenant schema, then register it.

        The cached allow-list is not touched; callers add the tenant once
        the transaction has committed.
        """
        await create_schema(transaction, tenant.schema_name)
        self.set_tenant(tenant.schema_name)
        await self.setup_tables(transaction)
        await self.populate_tables(transaction)
        await TenantInfoRepository(transaction).add(tenant)
        self._probe.tenant_created(tenant.schema_name)

    async def drop_tenant(
        self, transaction: TransactionHandle, tenant: TenantInfo
    ) -> None:
        """Unregister a tenant and drop its schema."""
        await TenantInfoRepository(transaction).remove(tenant)
        await drop_schema(transaction, tenant.schema_name)
        if self._tenant == tenant.schema_name:
            self._tenant = None
            self._models = None
            self._handles = {}
        self._probe.tenant_dropped(tenant.schema_name)
