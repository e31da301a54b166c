"""Snapshot and restore the demo tenant.

The demo tenant is reset to a known state between demonstrations and test
runs. ``backup`` stores every demo table as JSON in DemoBackup; ``restore``
empties the tables child-first and refills them parent-first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from infrastructure.database.transaction import begin
from migrations.domain.records import DemoBackupRecord
from migrations.domain.template_values import add_months
from migrations.infrastructure.demo_backup_repository import DemoBackupRepository
from migrations.observability import DefaultDemoBackupProbe, DemoBackupProbe

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from infrastructure.database.transaction import TransactionHandle
    from migrations.application.migration_helper import MigrationHelper
    from migrations.application.session import ToolchainSession

USER_TABLE = "User"
CONTENT_TABLES = ("DocumentContent", "ImageContent", "VideoContent")
PASSWORD_LIFETIME_MONTHS = 6


class DemoBackupHelper:
    """Keeps the DemoBackup snapshot and restores the demo tenant from it."""

    def __init__(
        self,
        session: ToolchainSession,
        migrations: MigrationHelper,
        probe: DemoBackupProbe | None = None,
    ) -> None:
        self._session = session
        self._migrations = migrations
        self._probe = probe or DefaultDemoBackupProbe()

    def _table_order(self) -> list[str]:
        if self._session.demo_table_order is not None:
            return list(self._session.demo_table_order)
        return [entry.table_name for entry in self._session.fixtures.read_model_list()]

    async def backup(self, transaction: TransactionHandle) -> list[DemoBackupRecord]:
        """Replace the snapshot with the current demo tenant contents."""
        tenant = self._session.demo_tenant
        records = []
        for position, table_name in enumerate(self._table_order(), start=1):
            table = await self._migrations.get_table(transaction, table_name, tenant)
            records.append(
                DemoBackupRecord(
                    table_name=table_name,
                    position=position,
                    rows=await table.find_all(),
                )
            )
        await DemoBackupRepository(transaction).replace_all(records)
        self._probe.backup_completed(
            tenant, len(records), sum(len(record.rows) for record in records)
        )
        return records

    async def restore(self, transaction: TransactionHandle) -> list[DemoBackupRecord]:
        """Reset the demo tenant tables to the snapshot.

        The snapshot order becomes the session's demo table order, so tables
        added or removed later in the same run are reflected by the next
        backup.
        """
        tenant = self._session.demo_tenant
        records = await DemoBackupRepository(transaction).list_ordered()
        self._session.demo_table_order = [record.table_name for record in records]

        tables = [
            await self._migrations.get_table(transaction, record.table_name, tenant)
            for record in records
        ]
        for table in reversed(tables):
            await table.destroy_all()

        row_count = 0
        for record, table in zip(records, tables):
            rows = record.rows
            if record.table_name == USER_TABLE:
                rows = self._refresh_credentials(rows, table.column_names)
            row_count += await table.bulk_create(rows)

        self._probe.restore_completed(tenant, len(records), row_count)
        return records

    async def reset(self, engine: AsyncEngine) -> list[str]:
        """Restore the demo tenant in a transaction of its own.

        Returns the storage keys referenced by content tables, so callers
        can check the stored files they point to.
        """
        async with begin(engine) as transaction:
            records = await self.restore(transaction)
        return [
            row["storageKey"]
            for record in records
            if record.table_name in CONTENT_TABLES
            for row in record.rows
            if row.get("storageKey")
        ]

    def _refresh_credentials(
        self, rows: list[dict[str, Any]], columns: list[str]
    ) -> list[dict[str, Any]]:
        # Stored hashes are reinserted untouched; only the validity window moves.
        now = self._session.clock()
        refreshed = {}
        if "startDate" in columns:
            refreshed["startDate"] = now
        if "passwordExpires" in columns:
            refreshed["passwordExpires"] = add_months(now, PASSWORD_LIFETIME_MONTHS)
        return [{**row, **refreshed} for row in rows]
