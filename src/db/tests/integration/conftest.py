"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Every test runs in a
transaction that is rolled back afterwards, so tenant schemas and the
public bookkeeping tables it creates never outlive the test.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
import os

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.engines import create_engine
from infrastructure.database.transaction import TransactionHandle
from infrastructure.settings import DatabaseSettings
from migrations.application.session import ToolchainSession
from migrations.infrastructure.demo_backup_repository import DemoBackupRepository
from migrations.infrastructure.fixtures import FixtureStore
from migrations.infrastructure.template_repository import TemplateRepository

FIXED_NOW = datetime(2024, 1, 31, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        TENANTDB_DB_HOST, TENANTDB_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("TENANTDB_DB_HOST", "localhost"),
        port=int(os.getenv("TENANTDB_DB_PORT", "5432")),
        database=os.getenv("TENANTDB_DB_DATABASE", "tenantdb"),
        username=os.getenv("TENANTDB_DB_USERNAME", "tenantdb"),
        password=SecretStr(os.getenv("TENANTDB_DB_PASSWORD", "tenantdb_dev_password")),
    )


@pytest_asyncio.fixture
async def transaction(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[TransactionHandle, None]:
    """Provide a transaction handle that is rolled back after the test."""
    engine = create_engine(integration_db_settings)
    try:
        connection = await engine.connect()
    except (OSError, SQLAlchemyError) as error:
        await engine.dispose()
        pytest.skip(f"PostgreSQL is not reachable: {error}")

    outer = await connection.begin()
    handle = TransactionHandle(connection)
    try:
        yield handle
    finally:
        handle.close()
        await outer.rollback()
        await connection.close()
        await engine.dispose()


@pytest_asyncio.fixture
async def fresh_registry(transaction: TransactionHandle) -> TemplateRepository:
    """Empty Template and DemoBackup tables, whatever the database held before."""
    templates = TemplateRepository(transaction)
    await templates.drop_table()
    await templates.create_table()
    backups = DemoBackupRepository(transaction)
    await backups.drop_table()
    await backups.create_table()
    return templates


@pytest.fixture
def session(tmp_path) -> ToolchainSession:
    """ToolchainSession over an empty seeds directory with a fixed clock."""
    return ToolchainSession(
        fixtures=FixtureStore(tmp_path / "seeds"),
        demo_tenant="it_demo",
        clock=lambda: FIXED_NOW,
    )
