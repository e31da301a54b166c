"""DDL on per-tenant tables.

Functions here take the synchronous ``Connection`` and are run through
``TransactionHandle.run_sync``. Column changes go through alembic's
``Operations`` so foreign keys and unique flags on an added column become
the matching ALTER TABLE constraints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import MetaData, Table, text
from sqlalchemy.schema import DropTable

if TYPE_CHECKING:
    from sqlalchemy import Column
    from sqlalchemy.engine import Connection


def _operations(connection: Connection) -> Operations:
    return Operations(MigrationContext.configure(connection))


def create_table(connection: Connection, table: Table) -> None:
    """Create ``table`` unless it already exists."""
    table.create(connection, checkfirst=True)


def drop_table(connection: Connection, table_name: str, schema: str) -> None:
    """Drop a table if it exists."""
    connection.execute(
        DropTable(Table(table_name, MetaData(), schema=schema), if_exists=True)
    )


def add_column(
    connection: Connection, table_name: str, column: Column[Any], schema: str
) -> None:
    """Add ``column`` to an existing table."""
    _operations(connection).add_column(table_name, column, schema=schema)


def drop_column(
    connection: Connection, table_name: str, column_name: str, schema: str
) -> None:
    """Drop one column of an existing table."""
    _operations(connection).drop_column(table_name, column_name, schema=schema)


def drop_table_cascade(connection: Connection, table_name: str, schema: str) -> None:
    """Drop a table and every object that depends on it."""
    preparer = connection.dialect.identifier_preparer
    name = preparer.format_table(Table(table_name, MetaData(), schema=schema))
    connection.execute(text(f"DROP TABLE IF EXISTS {name} CASCADE"))
