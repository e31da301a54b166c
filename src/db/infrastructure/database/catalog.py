"""Read-only queries against the PostgreSQL catalog.

Schema names are tenant names, so enumerating user schemas enumerates
tenants as the database sees them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect
from sqlalchemy.schema import CreateSchema, DropSchema

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

    from infrastructure.database.transaction import TransactionHandle

PUBLIC_SCHEMA = "public"

_SYSTEM_SCHEMAS = frozenset({PUBLIC_SCHEMA, "information_schema"})


def _user_schemas(connection: Connection) -> list[str]:
    names = inspect(connection).get_schema_names()
    return sorted(
        name
        for name in names
        if name not in _SYSTEM_SCHEMAS and not name.startswith("pg_")
    )


async def list_schemas(transaction: TransactionHandle) -> list[str]:
    """List every non-system schema, sorted by name."""
    return await transaction.run_sync(_user_schemas)


async def list_tables(
    transaction: TransactionHandle, schema: str = PUBLIC_SCHEMA
) -> list[str]:
    """List the tables of one schema."""
    return await transaction.run_sync(
        lambda connection: inspect(connection).get_table_names(schema=schema)
    )


async def table_exists(
    transaction: TransactionHandle, table_name: str, schema: str = PUBLIC_SCHEMA
) -> bool:
    """Check whether a table exists in a schema."""
    return await transaction.run_sync(
        lambda connection: inspect(connection).has_table(table_name, schema=schema)
    )


async def create_schema(transaction: TransactionHandle, schema: str) -> None:
    """Create a tenant schema."""
    await transaction.execute(CreateSchema(schema, if_not_exists=True))


async def drop_schema(transaction: TransactionHandle, schema: str) -> None:
    """Drop a tenant schema and everything in it."""
    await transaction.execute(DropSchema(schema, cascade=True, if_exists=True))
