"""Transaction handle shared by every write of one migration step.

A single asyncpg connection cannot run two statements at once, while the
tenant fan-out issues statements from several coroutines. The handle
serialises statement execution on its connection so coroutines interleave
at statement granularity inside the one transaction.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, TypeVar

from infrastructure.database.exceptions import TransactionError

if TYPE_CHECKING:
    from sqlalchemy import Executable, Result
    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

T = TypeVar("T")


class TransactionHandle:
    """Statement gateway over a connection with an open transaction."""

    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def connection(self) -> AsyncConnection:
        """The underlying connection."""
        return self._connection

    async def execute(
        self,
        statement: Executable,
        parameters: dict[str, Any] | list[dict[str, Any]] | None = None,
    ) -> Result[Any]:
        """Execute one statement inside the transaction."""
        self._ensure_open()
        async with self._lock:
            return await self._connection.execute(statement, parameters)

    async def run_sync(
        self, fn: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """Run a synchronous callable (DDL, reflection) on the connection.

        ``fn`` receives the synchronous ``Connection`` as first argument.
        """
        self._ensure_open()
        async with self._lock:
            return await self._connection.run_sync(fn, *args, **kwargs)

    def close(self) -> None:
        """Reject further statements; called once the transaction ends."""
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransactionError("Transaction handle used after commit or rollback")


@asynccontextmanager
async def begin(engine: AsyncEngine) -> AsyncIterator[TransactionHandle]:
    """Open a connection and transaction; commit on success, roll back on error.

    Usage:
        async with begin(engine) as transaction:
            await helper.add_column(transaction, ...)
    """
    async with engine.begin() as connection:
        handle = TransactionHandle(connection)
        try:
            yield handle
        finally:
            handle.close()

