"""Apply migration modules in file-name order.

A migration module lives in the versions directory and defines::

    async def up(context: MigrationContext) -> None: ...
    async def down(context: MigrationContext) -> None: ...

Each step runs in its own transaction. The file name is recorded in (or
removed from) MigrationMeta in that same transaction, so a failed step
leaves neither schema changes nor bookkeeping behind.
"""

from __future__ import annotations

import importlib.util
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from infrastructure.database.transaction import begin
from migrations.application.context import MigrationContext
from migrations.application.demo_backup_helper import DemoBackupHelper
from migrations.application.migration_helper import MigrationHelper
from migrations.application.seed_helper import SeedHelper
from migrations.infrastructure.migration_meta_repository import MigrationMetaRepository
from migrations.observability import (
    DefaultDemoBackupProbe,
    DefaultMigrationHelperProbe,
    DefaultMigrationRunnerProbe,
    DefaultSeedProbe,
    MigrationRunnerProbe,
)
from migrations.ports.exceptions import InvalidUsageError, MigrationFailedError
from shared_kernel.observability_context import ObservationContext
from tenancy.application.tenant_registry import TenantRegistry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from infrastructure.cache.store import CacheStore
    from infrastructure.database.transaction import TransactionHandle
    from migrations.application.session import ToolchainSession

UP = "up"
DOWN = "down"


@dataclass(frozen=True)
class MigrationScript:
    """One migration file."""

    name: str
    path: Path

    def load(self) -> ModuleType:
        """Import the file as a fresh module and check its entry points."""
        spec = importlib.util.spec_from_file_location(
            f"tenantdb_migration_{self.path.stem}", self.path
        )
        if spec is None or spec.loader is None:
            raise InvalidUsageError(f"Cannot load migration {self.name}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        for entry_point in (UP, DOWN):
            if not callable(getattr(module, entry_point, None)):
                raise InvalidUsageError(
                    f"Migration {self.name} does not define {entry_point}()"
                )
        return module


def discover_migrations(versions_dir: Path) -> list[MigrationScript]:
    """List the migration files of a directory, sorted by name."""
    return [
        MigrationScript(name=path.name, path=path)
        for path in sorted(Path(versions_dir).glob("*.py"))
        if not path.name.startswith("_")
    ]


class MigrationRunner:
    """Applies pending migrations and undoes the latest one."""

    def __init__(
        self,
        engine: AsyncEngine,
        session: ToolchainSession,
        versions_dir: Path,
        cache: CacheStore | None = None,
        tenants_cache_key: str = "tenants",
        probe: MigrationRunnerProbe | None = None,
        context: ObservationContext | None = None,
    ) -> None:
        self._engine = engine
        self._session = session
        self._versions_dir = Path(versions_dir)
        self._cache = cache
        self._tenants_cache_key = tenants_cache_key
        self._context = context or ObservationContext(command="migrate")
        self._probe = (probe or DefaultMigrationRunnerProbe()).with_context(self._context)

    async def applied(self) -> list[str]:
        """Return the names recorded in MigrationMeta."""
        async with begin(self._engine) as transaction:
            meta = MigrationMetaRepository(transaction)
            await meta.create_table()
            return await meta.applied()

    async def pending(self) -> list[MigrationScript]:
        """Return the migration files not applied yet, in apply order."""
        applied = set(await self.applied())
        return [
            script
            for script in discover_migrations(self._versions_dir)
            if script.name not in applied
        ]

    async def upgrade(self) -> list[str]:
        """Apply every pending migration; return the names applied."""
        scripts = await self.pending()
        if not scripts:
            self._probe.nothing_to_migrate(UP)
        for script in scripts:
            await self._run(script, UP)
        return [script.name for script in scripts]

    async def downgrade(self) -> str | None:
        """Undo the most recently applied migration; return its name."""
        applied = await self.applied()
        if not applied:
            self._probe.nothing_to_migrate(DOWN)
            return None
        name = applied[-1]
        scripts = {
            script.name: script for script in discover_migrations(self._versions_dir)
        }
        if name not in scripts:
            raise InvalidUsageError(f"Applied migration {name} has no file to undo it")
        await self._run(scripts[name], DOWN)
        return name

    def _build_context(
        self, transaction: TransactionHandle, observation: ObservationContext
    ) -> MigrationContext:
        migrations = MigrationHelper(
            self._session, DefaultMigrationHelperProbe().with_context(observation)
        )
        registry = None
        if self._cache is not None:
            registry = TenantRegistry(self._cache, self._tenants_cache_key)
        return MigrationContext(
            transaction=transaction,
            session=self._session,
            migrations=migrations,
            seeds=SeedHelper(
                self._session,
                migrations,
                cache=self._cache,
                use_registry=None,
                probe=DefaultSeedProbe().with_context(observation),
            ),
            demo=DemoBackupHelper(
                self._session,
                migrations,
                probe=DefaultDemoBackupProbe().with_context(observation),
            ),
            tenants=registry,
        )

    async def _run(self, script: MigrationScript, direction: str) -> None:
        module = script.load()
        observation = self._context.with_migration(script.name)
        self._probe.migration_started(script.name, direction)
        try:
            async with begin(self._engine) as transaction:
                meta = MigrationMetaRepository(transaction)
                await meta.create_table()
                context = self._build_context(transaction, observation)
                await getattr(module, direction)(context)
                if direction == UP:
                    await meta.record(script.name)
                else:
                    await meta.forget(script.name)
        except Exception as error:
            self._probe.migration_failed(script.name, direction, error)
            raise MigrationFailedError(script.name, direction, error) from error
        await context.run_after_commit()
        self._probe.migration_completed(script.name, direction)
