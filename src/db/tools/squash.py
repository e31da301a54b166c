"""Collapse the migration history into fixture files.

Squash replays every migration on an empty database, writes the resulting
tenants, table definitions and rows back to the seeds directory, deletes
every migration except the bootstrap one, and replays again to prove the
bootstrap migration alone rebuilds the same state.

Not transactional: an interrupted squash leaves the seeds and versions
directories half rewritten and is recovered from version control.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from infrastructure.database.catalog import list_schemas
from infrastructure.database.transaction import begin
from migrations.infrastructure.template_repository import TemplateRepository
from tenancy.infrastructure.tenant_info_repository import TenantInfoRepository
from tools.observability import DefaultSquashProbe, SquashProbe

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from migrations.application.migration_helper import MigrationHelper
    from migrations.application.runner import MigrationRunner
    from migrations.infrastructure.fixtures import FixtureStore
    from tools.wipe import WipeUtility


class SquashUtility:
    """Rewrites fixtures from a replayed database and prunes migrations."""

    def __init__(
        self,
        engine: AsyncEngine,
        wipe: WipeUtility,
        runner_factory: Callable[[], MigrationRunner],
        migrations: MigrationHelper,
        fixtures: FixtureStore,
        versions_dir: Path,
        bootstrap_migration: str,
        probe: SquashProbe | None = None,
    ) -> None:
        self._engine = engine
        self._wipe = wipe
        self._runner_factory = runner_factory
        self._migrations = migrations
        self._fixtures = fixtures
        self._versions_dir = Path(versions_dir)
        self._bootstrap_migration = bootstrap_migration
        self._probe = probe or DefaultSquashProbe()

    async def squash(self) -> list[str]:
        """Run the whole squash; return the deleted migration file names."""
        self._probe.squash_started()
        await self.rebuild()
        await self.write_fixtures()
        deleted = self.delete_migrations()
        await self.rebuild()
        self._probe.squash_completed(len(deleted))
        return deleted

    async def rebuild(self) -> None:
        """Wipe the database and apply every migration."""
        await self._wipe.wipe()
        await self._runner_factory().upgrade()

    async def write_fixtures(self) -> None:
        """Replace the fixture files with the current database contents."""
        async with begin(self._engine) as transaction:
            tenants = await TenantInfoRepository(transaction).list_all()
            schemas = await list_schemas(transaction)

            self._fixtures.clear(schemas)
            self._fixtures.write_seed_list(tenants)

            records = await TemplateRepository(transaction).list_ordered()
            for record in records:
                self._fixtures.write_definition(record.model_name, record.definition)
                for schema in schemas:
                    table = await self._migrations.get_table(
                        transaction, record.table_name, schema
                    )
                    self._fixtures.write_tenant_rows(
                        schema, record.model_name, await table.find_all()
                    )
            self._fixtures.write_model_list(
                record.to_model_list_entry() for record in records
            )
        self._probe.fixtures_written(len(tenants), len(records))

    def delete_migrations(self) -> list[str]:
        """Delete every migration file but the bootstrap one."""
        deleted = []
        for path in sorted(self._versions_dir.glob("*.py")):
            if path.name == self._bootstrap_migration or path.name.startswith("_"):
                continue
            path.unlink()
            self._probe.migration_file_deleted(path.name)
            deleted.append(path.name)
        return deleted
