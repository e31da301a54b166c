"""What a migration module's ``up`` / ``down`` receives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

if TYPE_CHECKING:
    from infrastructure.database.transaction import TransactionHandle
    from migrations.application.demo_backup_helper import DemoBackupHelper
    from migrations.application.migration_helper import MigrationHelper
    from migrations.application.seed_helper import SeedHelper
    from migrations.application.session import ToolchainSession
    from migrations.infrastructure.fixtures import FixtureStore
    from tenancy.application.tenant_registry import TenantRegistry
    from tenancy.domain.value_objects import TenantInfo

AfterCommit = Callable[[], Awaitable[None]]


class MigrationContext:
    """Transaction, helpers and run state for one migration step.

    Cache updates must not happen before the transaction commits, so they
    are queued with ``after_commit`` and run by the migration runner once
    the step has committed. They are dropped if the step rolls back.
    """

    def __init__(
        self,
        transaction: TransactionHandle,
        session: ToolchainSession,
        migrations: MigrationHelper,
        seeds: SeedHelper,
        demo: DemoBackupHelper,
        tenants: TenantRegistry | None = None,
    ) -> None:
        self.transaction = transaction
        self.session = session
        self.migrations = migrations
        self.seeds = seeds
        self.demo = demo
        self.tenants = tenants
        self._after_commit: list[AfterCommit] = []

    @property
    def fixtures(self) -> FixtureStore:
        return self.session.fixtures

    def after_commit(self, callback: AfterCommit) -> None:
        """Queue a coroutine function to run after the step commits."""
        self._after_commit.append(callback)

    async def run_after_commit(self) -> None:
        """Run queued callbacks in order; called by the runner."""
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            await callback()

    async def all_tenants(self) -> list[str]:
        """List the tenant schemas as the database sees them."""
        return await self.migrations.get_tenants(self.transaction)

    async def create_tenant(self, tenant: TenantInfo) -> None:
        """Create and seed a tenant; add it to the allow-list after commit."""
        await self.seeds.create_tenant(self.transaction, tenant)
        if self.tenants is not None:
            registry = self.tenants
            self.after_commit(lambda: registry.add(tenant.schema_name))

    async def drop_tenant(self, tenant: TenantInfo) -> None:
        """Drop a tenant; remove it from the allow-list after commit."""
        await self.seeds.drop_tenant(self.transaction, tenant)
        if self.tenants is not None:
            registry = self.tenants
            self.after_commit(lambda: registry.remove(tenant.schema_name))
