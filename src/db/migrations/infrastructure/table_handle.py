"""Row access to one live per-tenant table inside a transaction."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from itertools import groupby
from typing import TYPE_CHECKING, Any, Iterable

from sqlalchemy import Date, DateTime, Numeric, delete, insert, select

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.types import TypeEngine

    from infrastructure.database.transaction import TransactionHandle


def _coerce(column_type: TypeEngine[Any], value: Any) -> Any:
    # Fixture and backup files carry timestamps and decimals as strings.
    if not isinstance(value, str):
        return value
    if isinstance(column_type, DateTime):
        parsed = datetime.fromisoformat(value)
        if column_type.timezone and parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    if isinstance(column_type, Date):
        return date.fromisoformat(value[:10])
    if isinstance(column_type, Numeric) and column_type.asdecimal:
        return Decimal(value)
    return value


def coerce_row(table: Table, row: dict[str, Any]) -> dict[str, Any]:
    """Keep the keys that name columns and convert their values for insert."""
    return {
        key: _coerce(table.c[key].type, value)
        for key, value in row.items()
        if key in table.c
    }


class TableHandle:
    """A per-tenant table bound to the caller's transaction."""

    def __init__(self, table: Table, transaction: TransactionHandle) -> None:
        self._table = table
        self._transaction = transaction

    @property
    def table(self) -> Table:
        return self._table

    @property
    def name(self) -> str:
        return self._table.name

    @property
    def schema(self) -> str | None:
        return self._table.schema

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._table.columns]

    async def find_all(self) -> list[dict[str, Any]]:
        """Return every row, ordered by primary key when there is one."""
        statement = select(self._table).order_by(*self._table.primary_key.columns)
        result = await self._transaction.execute(statement)
        return [dict(row._mapping) for row in result]

    async def column_values(self, column: str) -> list[Any]:
        """Return one column of every row."""
        result = await self._transaction.execute(select(self._table.c[column]))
        return list(result.scalars())

    async def bulk_create(self, rows: Iterable[dict[str, Any]]) -> int:
        """Insert rows as they are; no application hooks run.

        Consecutive rows with the same key set share one executemany call.
        Returns the number of rows inserted.
        """
        prepared = [coerce_row(self._table, row) for row in rows]
        for _, group in groupby(prepared, key=lambda row: tuple(sorted(row))):
            await self._transaction.execute(insert(self._table), list(group))
        return len(prepared)

    async def destroy_all(self) -> None:
        """Delete every row."""
        await self._transaction.execute(delete(self._table))

    async def destroy_where_in(self, column: str, values: Iterable[Any]) -> None:
        """Delete the rows whose ``column`` is one of ``values``."""
        await self._transaction.execute(
            delete(self._table).where(self._table.c[column].in_(list(values)))
        )
