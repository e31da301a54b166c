"""PostgreSQL access to the Template registry.

Positions are kept dense (1..n) by shifting neighbours on insert and
removal; every change goes through the caller's transaction so the
registry moves together with the DDL it describes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update

from infrastructure.database.catalog import PUBLIC_SCHEMA, table_exists
from migrations.domain.records import TemplateRecord
from migrations.infrastructure import serialization
from migrations.infrastructure.ddl import drop_table
from migrations.infrastructure.models import TemplateModel

if TYPE_CHECKING:
    from sqlalchemy import Row

    from infrastructure.database.transaction import TransactionHandle

_table = TemplateModel.__table__


def _to_record(row: Row[Any]) -> TemplateRecord:
    return TemplateRecord(
        id=str(row.id),
        table_name=row.tableName,
        position=row.position,
        definition=serialization.loads(row.definition),
        timestamps=bool(row.timestamps),
    )


def _to_values(record: TemplateRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "tableName": record.table_name,
        "position": record.position,
        "definition": serialization.dumps(record.definition),
        "timestamps": record.timestamps,
    }


class TemplateRepository:
    """Reads and writes Template rows inside one transaction."""

    def __init__(self, transaction: TransactionHandle) -> None:
        self._transaction = transaction

    async def exists(self) -> bool:
        """Check whether the Template table has been created."""
        return await table_exists(self._transaction, _table.name, PUBLIC_SCHEMA)

    async def create_table(self) -> None:
        await self._transaction.run_sync(_table.create, checkfirst=True)

    async def drop_table(self) -> None:
        await self._transaction.run_sync(drop_table, _table.name, PUBLIC_SCHEMA)

    async def get(self, table_name: str) -> TemplateRecord | None:
        """Return the registry row of ``table_name``, or None."""
        result = await self._transaction.execute(
            select(_table).where(_table.c.tableName == table_name)
        )
        row = result.first()
        return _to_record(row) if row is not None else None

    async def list_ordered(self) -> list[TemplateRecord]:
        """Return every row by ascending position."""
        result = await self._transaction.execute(
            select(_table).order_by(_table.c.position)
        )
        return [_to_record(row) for row in result]

    async def shift_positions(self, after: int, delta: int) -> None:
        """Add ``delta`` to every position greater than ``after``."""
        await self._transaction.execute(
            update(_table)
            .where(_table.c.position > after)
            .values(position=_table.c.position + delta)
        )

    async def add(self, *records: TemplateRecord) -> None:
        if records:
            await self._transaction.execute(
                insert(_table), [_to_values(record) for record in records]
            )

    async def remove(self, table_name: str) -> None:
        await self._transaction.execute(
            delete(_table).where(_table.c.tableName == table_name)
        )

    async def update_definition(
        self, table_name: str, definition: dict[str, Any]
    ) -> None:
        await self._transaction.execute(
            update(_table)
            .where(_table.c.tableName == table_name)
            .values(definition=serialization.dumps(definition))
        )
