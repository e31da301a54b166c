"""Bookkeeping of applied migration files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from migrations.infrastructure.models import MigrationMetaModel

if TYPE_CHECKING:
    from infrastructure.database.transaction import TransactionHandle

_table = MigrationMetaModel.__table__

BOOKKEEPING_TABLE = _table.name


class MigrationMetaRepository:
    """Records which migration files have been applied."""

    def __init__(self, transaction: TransactionHandle) -> None:
        self._transaction = transaction

    async def create_table(self) -> None:
        await self._transaction.run_sync(_table.create, checkfirst=True)

    async def applied(self) -> list[str]:
        """Return applied migration names in apply order."""
        result = await self._transaction.execute(
            select(_table.c.name).order_by(_table.c.name)
        )
        return list(result.scalars())

    async def record(self, name: str) -> None:
        await self._transaction.execute(insert(_table).values(name=name))

    async def forget(self, name: str) -> None:
        await self._transaction.execute(delete(_table).where(_table.c.name == name))
