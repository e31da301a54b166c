"""Unit tests for MigrationRunner with a mocked database."""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

from migrations.application.migration_helper import MigrationHelper
from migrations.application.runner import (
    MigrationRunner,
    MigrationScript,
    discover_migrations,
)
from migrations.domain.model_list import ModelListEntry
from migrations.domain.records import TemplateRecord
from migrations.ports.exceptions import InvalidUsageError, MigrationFailedError
from shared_kernel.observability_context import ObservationContext
from tenancy.domain.value_objects import TenantInfo

MODULE = "migrations.application.runner"

STEP = '''
async def up(context):
    await context.transaction.mark("{name}", "up")
    context.after_commit(context.transaction.committed)


async def down(context):
    await context.transaction.mark("{name}", "down")
'''

FAILING_STEP = '''
async def up(context):
    context.after_commit(context.transaction.committed)
    raise RuntimeError("boom")


async def down(context):
    pass
'''


def write_step(versions_dir, name, body=None):
    path = versions_dir / name
    path.write_text(body or STEP.format(name=name))
    return path


@pytest.fixture
def versions_dir(tmp_path):
    path = tmp_path / "versions"
    path.mkdir()
    return path


@pytest.fixture
def transaction():
    return AsyncMock()


@pytest.fixture
def meta():
    repository = Mock()
    repository.create_table = AsyncMock()
    repository.applied = AsyncMock(return_value=[])
    repository.record = AsyncMock()
    repository.forget = AsyncMock()
    return repository


@pytest.fixture
def runner(session, versions_dir, transaction, meta):
    """MigrationRunner whose transactions yield the mock transaction."""
    begin = MagicMock()
    begin.return_value.__aenter__ = AsyncMock(return_value=transaction)
    begin.return_value.__aexit__ = AsyncMock(return_value=False)
    with (
        patch(f"{MODULE}.begin", begin),
        patch(f"{MODULE}.MigrationMetaRepository", return_value=meta),
    ):
        yield MigrationRunner(Mock(), session, versions_dir, probe=Mock())


class TestDiscoverMigrations:
    """Tests for finding migration files."""

    def test_sorted_and_private_files_skipped(self, versions_dir):
        write_step(versions_dir, "20200601000000_b.py")
        write_step(versions_dir, "20200101000000_a.py")
        write_step(versions_dir, "__init__.py", "")
        (versions_dir / "notes.txt").write_text("")

        names = [script.name for script in discover_migrations(versions_dir)]

        assert names == ["20200101000000_a.py", "20200601000000_b.py"]

    def test_load_requires_up_and_down(self, versions_dir):
        path = write_step(versions_dir, "20200101000000_a.py", "async def up(context):\n    pass\n")

        with pytest.raises(InvalidUsageError, match="down"):
            MigrationScript(path.name, path).load()


class TestUpgrade:
    """Tests for MigrationRunner.upgrade."""

    @pytest.mark.asyncio
    async def test_applies_pending_in_order(self, runner, versions_dir, transaction, meta):
        write_step(versions_dir, "20200101000000_a.py")
        write_step(versions_dir, "20200601000000_b.py")
        meta.applied.return_value = ["20200101000000_a.py"]

        applied = await runner.upgrade()

        assert applied == ["20200601000000_b.py"]
        transaction.mark.assert_awaited_once_with("20200601000000_b.py", "up")
        meta.record.assert_awaited_once_with("20200601000000_b.py")
        transaction.committed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_pending(self, runner, versions_dir):
        assert await runner.upgrade() == []

    @pytest.mark.asyncio
    async def test_failure_is_wrapped_and_skips_after_commit(
        self, runner, versions_dir, transaction, meta
    ):
        write_step(versions_dir, "20200101000000_a.py", FAILING_STEP)

        with pytest.raises(MigrationFailedError) as excinfo:
            await runner.upgrade()

        assert excinfo.value.migration == "20200101000000_a.py"
        assert excinfo.value.direction == "up"
        assert isinstance(excinfo.value.cause, RuntimeError)
        meta.record.assert_not_awaited()
        transaction.committed.assert_not_awaited()


class TestDowngrade:
    """Tests for MigrationRunner.downgrade."""

    @pytest.mark.asyncio
    async def test_undoes_latest(self, runner, versions_dir, transaction, meta):
        write_step(versions_dir, "20200101000000_a.py")
        write_step(versions_dir, "20200601000000_b.py")
        meta.applied.return_value = ["20200101000000_a.py", "20200601000000_b.py"]

        assert await runner.downgrade() == "20200601000000_b.py"

        transaction.mark.assert_awaited_once_with("20200601000000_b.py", "down")
        meta.forget.assert_awaited_once_with("20200601000000_b.py")

    @pytest.mark.asyncio
    async def test_nothing_applied(self, runner):
        assert await runner.downgrade() is None

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, runner, meta):
        meta.applied.return_value = ["20200101000000_gone.py"]

        with pytest.raises(InvalidUsageError, match="no file"):
            await runner.downgrade()


class TestBuildContext:
    """Tests for the context handed to migration modules."""

    @pytest.mark.asyncio
    async def test_created_tenant_follows_template_registry(
        self, runner, fixture_store, transaction
    ):
        fixture_store.write_model_list([ModelListEntry.for_table("Language")])
        fixture_store.write_definition("language", {"id": {"type": "{{TypeRef.STRING}}"}})
        templates = Mock()
        templates.exists = AsyncMock(return_value=True)
        templates.list_ordered = AsyncMock(
            return_value=[
                TemplateRecord("Language", 1, {"id": {"type": "{{TypeRef.STRING}}"}}),
                TemplateRecord("Permission", 2, {"id": {"type": "{{TypeRef.UUID}}"}}),
            ]
        )
        tenants = Mock()
        tenants.add = AsyncMock()
        define_table = AsyncMock()
        seed_module = "migrations.application.seed_helper"

        with (
            patch(f"{seed_module}.TemplateRepository", return_value=templates),
            patch(f"{seed_module}.create_schema", AsyncMock()),
            patch(f"{seed_module}.TenantInfoRepository", return_value=tenants),
            patch.object(MigrationHelper, "define_table", define_table),
        ):
            context = runner._build_context(transaction, ObservationContext())
            await context.create_tenant(TenantInfo("1", "newco"))

        created = [call.args[1] for call in define_table.await_args_list]
        assert created == ["Language", "Permission"]
        tenants.add.assert_awaited_once_with(TenantInfo("1", "newco"))

    @pytest.mark.asyncio
    async def test_bootstrap_seeds_from_fixtures_before_registry_exists(
        self, runner, fixture_store, transaction
    ):
        fixture_store.write_model_list([ModelListEntry.for_table("Language")])
        fixture_store.write_definition("language", {"id": {"type": "{{TypeRef.STRING}}"}})
        templates = Mock()
        templates.exists = AsyncMock(return_value=False)
        templates.list_ordered = AsyncMock()
        define_table = AsyncMock()
        seed_module = "migrations.application.seed_helper"

        with (
            patch(f"{seed_module}.TemplateRepository", return_value=templates),
            patch.object(MigrationHelper, "define_table", define_table),
        ):
            context = runner._build_context(transaction, ObservationContext())
            context.seeds.set_tenant("demo")
            await context.seeds.setup_tables(transaction)

        templates.list_ordered.assert_not_awaited()
        assert [call.args[1] for call in define_table.await_args_list] == ["Language"]
