"""Apply one schema change to many tenant schemas.

Every public method takes the caller's transaction handle and issues all of
its statements (per-tenant DDL, Template registry updates) through it, so a
migration either changes every tenant and the registry or none of them.

Example:
    async def up(context):
        await context.migrations.add_table_to_tenants(
            context.transaction,
            "Permission",
            {"id": {"type": "{{TypeRef.UUID}}", "primaryKey": True}},
            await context.all_tenants(),
            insert_after="Role",
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, TypeVar

from sqlalchemy import MetaData

from infrastructure.database.catalog import PUBLIC_SCHEMA, list_schemas, table_exists
from migrations.application.fan_out import for_all_tenants
from migrations.domain.definitions import ColumnDefinition, TableDefinition
from migrations.domain.model_list import splice_after
from migrations.domain.records import TemplateRecord
from migrations.domain.template_values import parse_template, substitute, to_serializable
from migrations.domain.translations import build_translation_rows, get_translation_keys
from migrations.infrastructure import ddl
from migrations.infrastructure.demo_backup_repository import DemoBackupRepository
from migrations.infrastructure.schema_builder import build_column, build_table, reflect_table
from migrations.infrastructure.table_handle import TableHandle
from migrations.infrastructure.template_repository import TemplateRepository
from migrations.observability import DefaultMigrationHelperProbe, MigrationHelperProbe
from migrations.ports.exceptions import InvalidUsageError

if TYPE_CHECKING:
    from infrastructure.database.transaction import TransactionHandle
    from migrations.application.session import ToolchainSession

T = TypeVar("T")

TRANSLATION_TABLE = "Translation"
LANGUAGE_TABLE = "Language"


class MigrationHelper:
    """Schema changes fanned out over tenants, kept in step with Template."""

    def __init__(
        self,
        session: ToolchainSession,
        probe: MigrationHelperProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultMigrationHelperProbe()

    @staticmethod
    def get_translation_keys(translations: dict[str, Any]) -> list[str]:
        """Return the dot-joined keys of a translation tree."""
        return get_translation_keys(translations)

    async def for_all_tenants(
        self, tenants: Iterable[str], operation: Callable[[str], Awaitable[T]]
    ) -> list[T]:
        """Run ``operation`` for every tenant; raise the first failure."""
        return await for_all_tenants(tenants, operation, self._probe)

    def process_attributes(self, attributes: dict[str, Any], tenant: str) -> dict[str, Any]:
        """Resolve the placeholders of an attribute map for one tenant."""
        return substitute(parse_template(attributes), tenant, self._session.clock)

    def get_definition_from_file(self, model_name: str, tenant: str) -> dict[str, Any]:
        """Load ``models/defs/<model_name>.json`` resolved for one tenant."""
        return self.process_attributes(
            self._session.fixtures.read_definition(model_name), tenant
        )

    async def get_tenants(self, transaction: TransactionHandle) -> list[str]:
        """List the tenant schemas present in the database."""
        return await list_schemas(transaction)

    async def define_table(
        self,
        transaction: TransactionHandle,
        table_name: str,
        definition: dict[str, Any],
        tenant: str,
        timestamps: bool = False,
    ) -> TableHandle:
        """Create a table from a definition unless it exists; return its handle."""
        resolved = self.process_attributes(definition, tenant)
        table = build_table(
            MetaData(),
            TableDefinition.from_attributes(table_name, resolved, timestamps),
            tenant,
        )
        await transaction.run_sync(ddl.create_table, table)
        return TableHandle(table, transaction)

    async def get_table(
        self, transaction: TransactionHandle, table_name: str, tenant: str
    ) -> TableHandle:
        """Return a handle on a live tenant table.

        The column layout comes from the Template registry when it holds the
        table; otherwise (public schema, registry not created yet, unknown
        table) it is read back from the database catalog.
        """
        if tenant != PUBLIC_SCHEMA:
            templates = TemplateRepository(transaction)
            if await templates.exists():
                record = await templates.get(table_name)
                if record is not None:
                    return await self.define_table(
                        transaction,
                        table_name,
                        record.definition,
                        tenant,
                        record.timestamps,
                    )
        if not await table_exists(transaction, table_name, tenant):
            raise InvalidUsageError(
                f"Table {table_name!r} does not exist in schema {tenant!r}"
            )
        table = await transaction.run_sync(reflect_table, table_name, tenant)
        return TableHandle(table, transaction)

    async def add_table_to_tenants(
        self,
        transaction: TransactionHandle,
        table_name: str,
        definition: dict[str, Any],
        tenants: Iterable[str],
        insert_after: str | None = None,
        timestamps: bool = False,
    ) -> dict[str, TableHandle]:
        """Create a table in every tenant and register it after ``insert_after``.

        ``insert_after`` None registers the table first.
        """
        names = list(tenants)
        stored = to_serializable(parse_template(definition))
        templates = TemplateRepository(transaction)
        registry_exists = await templates.exists()

        anchor_position = 0
        if registry_exists and insert_after is not None:
            anchor = await templates.get(insert_after)
            if anchor is None:
                raise InvalidUsageError(
                    f"Cannot insert {table_name!r} after unknown table {insert_after!r}"
                )
            anchor_position = anchor.position

        handles = await self.for_all_tenants(
            names,
            lambda tenant: self.define_table(
                transaction, table_name, stored, tenant, timestamps
            ),
        )

        position = None
        if registry_exists:
            await templates.shift_positions(after=anchor_position, delta=1)
            position = anchor_position + 1
            await templates.add(
                TemplateRecord(
                    table_name=table_name,
                    position=position,
                    definition=stored,
                    timestamps=timestamps,
                )
            )
        await self._update_demo_order(
            transaction, lambda order: splice_after(order, table_name, insert_after)
        )

        self._probe.table_added(table_name, names, position)
        return dict(zip(names, handles))

    async def remove_table_from_tenants(
        self,
        transaction: TransactionHandle,
        table_name: str,
        tenants: Iterable[str],
    ) -> None:
        """Drop a table from every tenant and from the registry."""
        names = list(tenants)
        templates = TemplateRepository(transaction)
        record = None
        if await templates.exists():
            record = await templates.get(table_name)
            if record is None:
                raise InvalidUsageError(f"Table {table_name!r} is not registered")

        await self.for_all_tenants(
            names,
            lambda tenant: transaction.run_sync(ddl.drop_table, table_name, tenant),
        )

        if record is not None:
            await templates.shift_positions(after=record.position, delta=-1)
            await templates.remove(table_name)
        await self._update_demo_order(
            transaction,
            lambda order: [name for name in order if name != table_name],
        )

        self._probe.table_removed(table_name, names)

    async def add_column(
        self,
        transaction: TransactionHandle,
        table_name: str,
        column_name: str,
        attributes: dict[str, Any],
        tenants: Iterable[str],
    ) -> None:
        """Add a column to a table in every tenant and to its definition."""
        names = list(tenants)
        parsed = parse_template(attributes)
        record = await self._registered(transaction, table_name)

        async def alter(tenant: str) -> None:
            resolved = substitute(parsed, tenant, self._session.clock)
            column = build_column(
                ColumnDefinition.from_attributes(column_name, resolved), tenant
            )
            await transaction.run_sync(ddl.add_column, table_name, column, tenant)

        await self.for_all_tenants(names, alter)

        if record is not None:
            definition = {**record.definition, column_name: to_serializable(parsed)}
            await TemplateRepository(transaction).update_definition(table_name, definition)
        self._probe.column_added(table_name, column_name, names)

    async def remove_column(
        self,
        transaction: TransactionHandle,
        table_name: str,
        column_name: str,
        tenants: Iterable[str],
    ) -> None:
        """Drop a column from a table in every tenant and from its definition."""
        names = list(tenants)
        record = await self._registered(transaction, table_name)

        await self.for_all_tenants(
            names,
            lambda tenant: transaction.run_sync(
                ddl.drop_column, table_name, column_name, tenant
            ),
        )

        if record is not None:
            definition = {
                key: value
                for key, value in record.definition.items()
                if key != column_name
            }
            await TemplateRepository(transaction).update_definition(table_name, definition)
        self._probe.column_removed(table_name, column_name, names)

    async def add_translations(
        self,
        transaction: TransactionHandle,
        translations: dict[str, Any],
        tenants: Iterable[str],
        language_ids: Iterable[str] | None = None,
    ) -> None:
        """Insert one Translation row per flattened key and language.

        Without ``language_ids`` every Language row of each tenant is used.
        """
        supplied = list(language_ids) if language_ids is not None else []

        async def insert(tenant: str) -> None:
            languages = supplied
            if not languages:
                language_table = await self.get_table(transaction, LANGUAGE_TABLE, tenant)
                languages = [str(value) for value in await language_table.column_values("id")]
            rows = build_translation_rows(translations, languages)
            table = await self.get_table(transaction, TRANSLATION_TABLE, tenant)
            await table.bulk_create(rows)
            self._probe.translations_added(tenant, len(rows))

        await self.for_all_tenants(tenants, insert)

    async def remove_translations(
        self,
        transaction: TransactionHandle,
        translation_keys: Iterable[str],
        tenants: Iterable[str],
    ) -> None:
        """Delete the Translation rows of the given keys in every tenant."""
        keys = list(translation_keys)
        names = list(tenants)

        async def delete(tenant: str) -> None:
            table = await self.get_table(transaction, TRANSLATION_TABLE, tenant)
            await table.destroy_where_in("translationKey", keys)

        await self.for_all_tenants(names, delete)
        self._probe.translations_removed(keys, names)

    async def _registered(
        self, transaction: TransactionHandle, table_name: str
    ) -> TemplateRecord | None:
        templates = TemplateRepository(transaction)
        if not await templates.exists():
            return None
        record = await templates.get(table_name)
        if record is None:
            raise InvalidUsageError(f"Table {table_name!r} is not registered")
        return record

    async def _update_demo_order(
        self,
        transaction: TransactionHandle,
        change: Callable[[list[str]], list[str]],
    ) -> None:
        order = self._session.demo_table_order
        if order is None:
            return
        if await DemoBackupRepository(transaction).exists():
            self._session.demo_table_order = change(order)
