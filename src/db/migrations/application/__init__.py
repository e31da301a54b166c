"""Application layer for migrations: helpers, fan-out and the runner."""

from migrations.application.context import MigrationContext
from migrations.application.demo_backup_helper import DemoBackupHelper
from migrations.application.fan_out import for_all_tenants
from migrations.application.migration_helper import MigrationHelper
from migrations.application.runner import MigrationRunner, discover_migrations
from migrations.application.seed_helper import SeedHelper
from migrations.application.session import ToolchainSession

__all__ = [
    "DemoBackupHelper",
    "MigrationContext",
    "MigrationHelper",
    "MigrationRunner",
    "SeedHelper",
    "ToolchainSession",
    "discover_migrations",
    "for_all_tenants",
]
