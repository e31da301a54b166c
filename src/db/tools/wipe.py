"""Clear the relational and cache stores.

The database may still be starting when a wipe runs (fresh containers), so
connecting is retried a fixed number of times before giving up.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.catalog import (
    PUBLIC_SCHEMA,
    drop_schema,
    list_schemas,
    list_tables,
)
from infrastructure.database.exceptions import DatabaseUnavailableError
from infrastructure.database.transaction import begin
from infrastructure.observability.probes import ConnectionProbe, DefaultConnectionProbe
from migrations.infrastructure.ddl import drop_table_cascade
from migrations.infrastructure.migration_meta_repository import BOOKKEEPING_TABLE
from tools.observability import DefaultWipeProbe, WipeProbe

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from infrastructure.cache.store import CacheStore
    from infrastructure.settings import ToolchainSettings


class WipeUtility:
    """Drops every tenant schema and public table, then flushes the cache."""

    def __init__(
        self,
        engine: AsyncEngine,
        settings: ToolchainSettings,
        cache: CacheStore | None = None,
        probe: WipeProbe | None = None,
        connection_probe: ConnectionProbe | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._engine = engine
        self._settings = settings
        self._cache = cache
        self._probe = probe or DefaultWipeProbe()
        self._connection_probe = connection_probe or DefaultConnectionProbe()
        self._sleep = sleep

    async def wait_for_database(self) -> None:
        """Block until ``SELECT 1`` succeeds.

        Raises:
            DatabaseUnavailableError: every attempt failed
        """
        limit = self._settings.reconnect_attempt_limit
        last_error: Exception | None = None
        for attempt in range(1, limit + 1):
            self._connection_probe.waiting_for_database(attempt, limit)
            try:
                async with self._engine.connect() as connection:
                    await connection.execute(text("SELECT 1"))
            except (OSError, SQLAlchemyError) as error:
                last_error = error
                self._connection_probe.connection_attempt_failed(attempt, limit, error)
                if attempt < limit:
                    await self._sleep(self._settings.reconnect_delay_seconds)
                continue
            self._connection_probe.connection_established(
                self._engine.url.host or "", self._engine.url.database or ""
            )
            return

        self._connection_probe.database_unavailable(limit, last_error)
        raise DatabaseUnavailableError(
            f"Database unreachable after {limit} attempts: {last_error}",
            attempts=limit,
        ) from last_error

    async def wipe(self) -> None:
        """Empty the database and the cache store."""
        await self.wait_for_database()

        async with begin(self._engine) as transaction:
            schemas = await list_schemas(transaction)
            for schema in schemas:
                await drop_schema(transaction, schema)
                self._probe.schema_dropped(schema)

            tables = await list_tables(transaction, PUBLIC_SCHEMA)
            dropped = 0
            for table_name in tables:
                if table_name == BOOKKEEPING_TABLE:
                    continue
                await transaction.run_sync(drop_table_cascade, table_name, PUBLIC_SCHEMA)
                self._probe.public_table_dropped(table_name)
                dropped += 1

            if BOOKKEEPING_TABLE in tables:
                await transaction.run_sync(
                    drop_table_cascade, BOOKKEEPING_TABLE, PUBLIC_SCHEMA
                )
            else:
                self._probe.bookkeeping_table_missing(BOOKKEEPING_TABLE)

        if self._cache is not None:
            await self._cache.flush_all()
        self._probe.wipe_completed(len(schemas), dropped)
