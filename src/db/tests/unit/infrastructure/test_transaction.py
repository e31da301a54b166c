"""Unit tests for the shared transaction handle."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from infrastructure.database.exceptions import TransactionError
from infrastructure.database.transaction import TransactionHandle, begin


class TestTransactionHandle:
    """Tests for TransactionHandle."""

    @pytest.mark.asyncio
    async def test_execute_delegates_to_connection(self):
        connection = Mock()
        connection.execute = AsyncMock(return_value="result")
        handle = TransactionHandle(connection)

        assert await handle.execute("statement", {"a": 1}) == "result"
        connection.execute.assert_awaited_once_with("statement", {"a": 1})

    @pytest.mark.asyncio
    async def test_statements_do_not_overlap(self):
        running = []
        overlapped = []

        async def execute(statement, parameters):
            if running:
                overlapped.append(statement)
            running.append(statement)
            await asyncio.sleep(0)
            running.remove(statement)

        connection = Mock()
        connection.execute = AsyncMock(side_effect=execute)
        handle = TransactionHandle(connection)

        await asyncio.gather(*(handle.execute(f"s{i}") for i in range(5)))

        assert overlapped == []
        assert connection.execute.await_count == 5

    @pytest.mark.asyncio
    async def test_run_sync_passes_arguments(self):
        connection = Mock()
        connection.run_sync = AsyncMock(return_value=True)
        handle = TransactionHandle(connection)

        def fn(conn, name, schema=None):
            return True

        assert await handle.run_sync(fn, "User", schema="demo") is True
        connection.run_sync.assert_awaited_once_with(fn, "User", schema="demo")

    @pytest.mark.asyncio
    async def test_closed_handle_rejects_statements(self):
        handle = TransactionHandle(Mock())
        handle.close()

        with pytest.raises(TransactionError):
            await handle.execute("statement")


class TestBegin:
    """Tests for the begin() context manager."""

    @staticmethod
    def engine(connection):
        engine = Mock()
        engine.begin = MagicMock()
        engine.begin.return_value.__aenter__ = AsyncMock(return_value=connection)
        engine.begin.return_value.__aexit__ = AsyncMock(return_value=False)
        return engine

    @pytest.mark.asyncio
    async def test_handle_closed_after_block(self):
        connection = Mock()
        engine = self.engine(connection)

        async with begin(engine) as handle:
            assert handle.connection is connection

        with pytest.raises(TransactionError):
            await handle.run_sync(print)
        engine.begin.return_value.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_error_propagates_to_engine_transaction(self):
        engine = self.engine(Mock())

        with pytest.raises(RuntimeError):
            async with begin(engine):
                raise RuntimeError("boom")

        exc_type = engine.begin.return_value.__aexit__.await_args.args[0]
        assert exc_type is RuntimeError
