"""PostgreSQL access to the DemoBackup snapshot table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from infrastructure.database.catalog import PUBLIC_SCHEMA, table_exists
from migrations.domain.records import DemoBackupRecord
from migrations.infrastructure import serialization
from migrations.infrastructure.ddl import drop_table
from migrations.infrastructure.models import DemoBackupModel

if TYPE_CHECKING:
    from infrastructure.database.transaction import TransactionHandle

_table = DemoBackupModel.__table__


class DemoBackupRepository:
    """Reads and replaces DemoBackup rows inside one transaction."""

    def __init__(self, transaction: TransactionHandle) -> None:
        self._transaction = transaction

    async def exists(self) -> bool:
        return await table_exists(self._transaction, _table.name, PUBLIC_SCHEMA)

    async def create_table(self) -> None:
        await self._transaction.run_sync(_table.create, checkfirst=True)

    async def drop_table(self) -> None:
        await self._transaction.run_sync(drop_table, _table.name, PUBLIC_SCHEMA)

    async def list_ordered(self) -> list[DemoBackupRecord]:
        """Return the snapshot by ascending position."""
        result = await self._transaction.execute(
            select(_table).order_by(_table.c.position)
        )
        return [
            DemoBackupRecord(
                id=str(row.id),
                table_name=row.tableName,
                position=row.position,
                rows=serialization.loads(row.contents),
            )
            for row in result
        ]

    async def replace_all(self, records: list[DemoBackupRecord]) -> None:
        """Delete the previous snapshot and store ``records``."""
        await self._transaction.execute(delete(_table))
        if not records:
            return
        await self._transaction.execute(
            insert(_table),
            [
                {
                    "id": record.id,
                    "tableName": record.table_name,
                    "position": record.position,
                    "contents": serialization.dumps(record.rows),
                }
                for record in records
            ],
        )
