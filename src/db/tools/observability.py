"""Domain probes for the operator tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class WipeProbe(Protocol):
    """Domain probe for clearing the database and cache."""

    def schema_dropped(self, schema: str) -> None:
        """Record that a tenant schema was dropped."""
        ...

    def public_table_dropped(self, table_name: str) -> None:
        """Record that a public table was dropped."""
        ...

    def bookkeeping_table_missing(self, table_name: str) -> None:
        """Record that there was no migration bookkeeping table to drop."""
        ...

    def wipe_completed(self, schema_count: int, table_count: int) -> None:
        """Record that the database and cache are empty."""
        ...

    def with_context(self, context: ObservationContext) -> WipeProbe:
        """Create a new probe with observation context bound."""
        ...


class SquashProbe(Protocol):
    """Domain probe for collapsing migration history into fixtures."""

    def squash_started(self) -> None:
        """Record that a squash began."""
        ...

    def fixtures_written(self, tenant_count: int, table_count: int) -> None:
        """Record that fixture files were rewritten from the database."""
        ...

    def migration_file_deleted(self, name: str) -> None:
        """Record that a migration file was folded into the fixtures."""
        ...

    def squash_completed(self, deleted_count: int) -> None:
        """Record that the squashed state replays cleanly."""
        ...

    def with_context(self, context: ObservationContext) -> SquashProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultWipeProbe:
    """Default implementation of WipeProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultWipeProbe:
        """Create a new probe with observation context bound."""
        return DefaultWipeProbe(logger=self._logger, context=context)

    def schema_dropped(self, schema: str) -> None:
        self._logger.info("schema_dropped", schema=schema, **self._get_context_kwargs())

    def public_table_dropped(self, table_name: str) -> None:
        self._logger.info(
            "public_table_dropped", table_name=table_name, **self._get_context_kwargs()
        )

    def bookkeeping_table_missing(self, table_name: str) -> None:
        self._logger.info(
            "no_migration_table", table_name=table_name, **self._get_context_kwargs()
        )

    def wipe_completed(self, schema_count: int, table_count: int) -> None:
        self._logger.info(
            "wipe_completed",
            schema_count=schema_count,
            table_count=table_count,
            **self._get_context_kwargs(),
        )


class DefaultSquashProbe:
    """Default implementation of SquashProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSquashProbe:
        """Create a new probe with observation context bound."""
        return DefaultSquashProbe(logger=self._logger, context=context)

    def squash_started(self) -> None:
        self._logger.info("squash_started", **self._get_context_kwargs())

    def fixtures_written(self, tenant_count: int, table_count: int) -> None:
        self._logger.info(
            "fixtures_written",
            tenant_count=tenant_count,
            table_count=table_count,
            **self._get_context_kwargs(),
        )

    def migration_file_deleted(self, name: str) -> None:
        self._logger.info(
            "migration_file_deleted", migration_name=name, **self._get_context_kwargs()
        )

    def squash_completed(self, deleted_count: int) -> None:
        self._logger.info(
            "squash_completed",
            deleted_count=deleted_count,
            **self._get_context_kwargs(),
        )
