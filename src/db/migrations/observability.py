"""Domain probes for the migrations bounded context.

Each helper reports through its own probe so migrations log what they did
per table and tenant without the helpers touching structlog directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class MigrationHelperProbe(Protocol):
    """Domain probe for schema changes fanned out over tenants."""

    def table_added(self, table_name: str, tenants: list[str], position: int | None) -> None:
        """Record that a table was created in every listed tenant."""
        ...

    def table_removed(self, table_name: str, tenants: list[str]) -> None:
        """Record that a table was dropped from every listed tenant."""
        ...

    def column_added(self, table_name: str, column_name: str, tenants: list[str]) -> None:
        """Record that a column was added in every listed tenant."""
        ...

    def column_removed(self, table_name: str, column_name: str, tenants: list[str]) -> None:
        """Record that a column was dropped in every listed tenant."""
        ...

    def translations_added(self, tenant: str, count: int) -> None:
        """Record the translation rows inserted for one tenant."""
        ...

    def translations_removed(self, keys: list[str], tenants: list[str]) -> None:
        """Record that translation keys were deleted."""
        ...

    def tenant_operation_failed(self, tenant: str, error: BaseException) -> None:
        """Record that the fan-out failed for one tenant."""
        ...

    def with_context(self, context: ObservationContext) -> MigrationHelperProbe:
        """Create a new probe with observation context bound."""
        ...


class SeedProbe(Protocol):
    """Domain probe for tenant seeding."""

    def tables_set_up(self, tenant: str, table_count: int) -> None:
        """Record that every table of a tenant exists."""
        ...

    def table_populated(self, tenant: str, table_name: str, row_count: int) -> None:
        """Record fixture rows inserted into one table."""
        ...

    def fixture_missing(self, tenant: str, model_name: str) -> None:
        """Record that a tenant has no fixture file for a model."""
        ...

    def tenant_created(self, tenant: str) -> None:
        """Record that a tenant schema was created and seeded."""
        ...

    def tenant_dropped(self, tenant: str) -> None:
        """Record that a tenant schema was dropped."""
        ...

    def with_context(self, context: ObservationContext) -> SeedProbe:
        """Create a new probe with observation context bound."""
        ...


class DemoBackupProbe(Protocol):
    """Domain probe for demo tenant snapshots."""

    def backup_completed(self, tenant: str, table_count: int, row_count: int) -> None:
        """Record that the demo tenant was snapshotted."""
        ...

    def restore_completed(self, tenant: str, table_count: int, row_count: int) -> None:
        """Record that the demo tenant was restored from its snapshot."""
        ...

    def with_context(self, context: ObservationContext) -> DemoBackupProbe:
        """Create a new probe with observation context bound."""
        ...


class MigrationRunnerProbe(Protocol):
    """Domain probe for applying migration modules."""

    def migration_started(self, name: str, direction: str) -> None:
        """Record that a migration module is about to run."""
        ...

    def migration_completed(self, name: str, direction: str) -> None:
        """Record that a migration committed."""
        ...

    def migration_failed(self, name: str, direction: str, error: BaseException) -> None:
        """Record that a migration raised and was rolled back."""
        ...

    def nothing_to_migrate(self, direction: str) -> None:
        """Record that no migration was pending (or applied, for undo)."""
        ...

    def with_context(self, context: ObservationContext) -> MigrationRunnerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMigrationHelperProbe:
    """Default implementation of MigrationHelperProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultMigrationHelperProbe:
        """Create a new probe with observation context bound."""
        return DefaultMigrationHelperProbe(logger=self._logger, context=context)

    def table_added(self, table_name: str, tenants: list[str], position: int | None) -> None:
        """Record that a table was created in every listed tenant."""
        self._logger.info(
            "table_added",
            table_name=table_name,
            tenants=tenants,
            position=position,
            **self._get_context_kwargs(),
        )

    def table_removed(self, table_name: str, tenants: list[str]) -> None:
        """Record that a table was dropped from every listed tenant."""
        self._logger.info(
            "table_removed",
            table_name=table_name,
            tenants=tenants,
            **self._get_context_kwargs(),
        )

    def column_added(self, table_name: str, column_name: str, tenants: list[str]) -> None:
        """Record that a column was added in every listed tenant."""
        self._logger.info(
            "column_added",
            table_name=table_name,
            column_name=column_name,
            tenants=tenants,
            **self._get_context_kwargs(),
        )

    def column_removed(self, table_name: str, column_name: str, tenants: list[str]) -> None:
        """Record that a column was dropped in every listed tenant."""
        self._logger.info(
            "column_removed",
            table_name=table_name,
            column_name=column_name,
            tenants=tenants,
            **self._get_context_kwargs(),
        )

    def translations_added(self, tenant: str, count: int) -> None:
        """Record the translation rows inserted for one tenant."""
        self._logger.info(
            "translations_added",
            schema=tenant,
            count=count,
            **self._get_context_kwargs(),
        )

    def translations_removed(self, keys: list[str], tenants: list[str]) -> None:
        """Record that translation keys were deleted."""
        self._logger.info(
            "translations_removed",
            key_count=len(keys),
            tenants=tenants,
            **self._get_context_kwargs(),
        )

    def tenant_operation_failed(self, tenant: str, error: BaseException) -> None:
        """Record that the fan-out failed for one tenant."""
        self._logger.error(
            "tenant_operation_failed",
            schema=tenant,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )


class DefaultSeedProbe:
    """Default implementation of SeedProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSeedProbe:
        """Create a new probe with observation context bound."""
        return DefaultSeedProbe(logger=self._logger, context=context)

    def tables_set_up(self, tenant: str, table_count: int) -> None:
        self._logger.info(
            "tables_set_up",
            schema=tenant,
            table_count=table_count,
            **self._get_context_kwargs(),
        )

    def table_populated(self, tenant: str, table_name: str, row_count: int) -> None:
        self._logger.debug(
            "table_populated",
            schema=tenant,
            table_name=table_name,
            row_count=row_count,
            **self._get_context_kwargs(),
        )

    def fixture_missing(self, tenant: str, model_name: str) -> None:
        self._logger.debug(
            "fixture_missing",
            schema=tenant,
            model_name=model_name,
            **self._get_context_kwargs(),
        )

    def tenant_created(self, tenant: str) -> None:
        self._logger.info("tenant_created", schema=tenant, **self._get_context_kwargs())

    def tenant_dropped(self, tenant: str) -> None:
        self._logger.info("tenant_dropped", schema=tenant, **self._get_context_kwargs())


class DefaultDemoBackupProbe:
    """Default implementation of DemoBackupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultDemoBackupProbe:
        """Create a new probe with observation context bound."""
        return DefaultDemoBackupProbe(logger=self._logger, context=context)

    def backup_completed(self, tenant: str, table_count: int, row_count: int) -> None:
        """Record that the demo tenant was snapshotted."""
        self._logger.info(
            "demo_backup_completed",
            schema=tenant,
            table_count=table_count,
            row_count=row_count,
            **self._get_context_kwargs(),
        )

    def restore_completed(self, tenant: str, table_count: int, row_count: int) -> None:
        """Record that the demo tenant was restored from its snapshot."""
        self._logger.info(
            "demo_restore_completed",
            schema=tenant,
            table_count=table_count,
            row_count=row_count,
            **self._get_context_kwargs(),
        )


class DefaultMigrationRunnerProbe:
    """Default implementation of MigrationRunnerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultMigrationRunnerProbe:
        """Create a new probe with observation context bound."""
        return DefaultMigrationRunnerProbe(logger=self._logger, context=context)

    def migration_started(self, name: str, direction: str) -> None:
        self._logger.info(
            "migration_started",
            migration_name=name,
            direction=direction,
            **self._get_context_kwargs(),
        )

    def migration_completed(self, name: str, direction: str) -> None:
        self._logger.info(
            "migration_completed",
            migration_name=name,
            direction=direction,
            **self._get_context_kwargs(),
        )

    def migration_failed(self, name: str, direction: str, error: BaseException) -> None:
        self._logger.error(
            "migration_failed",
            migration_name=name,
            direction=direction,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def nothing_to_migrate(self, direction: str) -> None:
        self._logger.info(
            "nothing_to_migrate", direction=direction, **self._get_context_kwargs()
        )
