"""Unit test fixtures with mocked dependencies."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from infrastructure.cache.store import CacheStore
from infrastructure.database.transaction import TransactionHandle
from migrations.application.session import ToolchainSession
from migrations.infrastructure.fixtures import FixtureStore

FIXED_NOW = datetime(2024, 1, 31, 12, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now():
    """The instant returned by the test clock."""
    return FIXED_NOW


@pytest.fixture
def mock_transaction():
    """Mock TransactionHandle whose statements all succeed."""
    transaction = Mock(spec=TransactionHandle)
    transaction.execute = AsyncMock()
    transaction.run_sync = AsyncMock()
    return transaction


@pytest.fixture
def fixture_store(tmp_path):
    """FixtureStore over an empty seeds directory."""
    return FixtureStore(tmp_path / "seeds")


@pytest.fixture
def session(fixture_store):
    """ToolchainSession with a fixed clock."""
    return ToolchainSession(fixtures=fixture_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def cache_values():
    """Backing dict of the mock cache store."""
    return {}


@pytest.fixture
def mock_cache(cache_values):
    """Mock CacheStore keeping values in ``cache_values``."""
    cache = Mock(spec=CacheStore)

    async def get(key):
        return cache_values.get(key)

    async def set_(key, value, ttl_seconds=None):
        cache_values[key] = value

    async def increment(key):
        cache_values[key] = str(int(cache_values.get(key, 0)) + 1)
        return int(cache_values[key])

    async def delete(key):
        cache_values.pop(key, None)

    cache.get = AsyncMock(side_effect=get)
    cache.set = AsyncMock(side_effect=set_)
    cache.increment = AsyncMock(side_effect=increment)
    cache.expire = AsyncMock()
    cache.delete = AsyncMock(side_effect=delete)
    cache.flush_all = AsyncMock(side_effect=cache_values.clear)
    return cache
