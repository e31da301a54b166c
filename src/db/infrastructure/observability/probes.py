"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database connectivity."""

    def waiting_for_database(self, attempt: int, limit: int) -> None:
        """Record that a connection attempt is about to be made."""
        ...

    def connection_established(self, host: str, database: str) -> None:
        """Record that a database connection was successfully established."""
        ...

    def connection_attempt_failed(
        self, attempt: int, limit: int, error: Exception
    ) -> None:
        """Record that one connection attempt failed."""
        ...

    def database_unavailable(self, attempts: int, error: Exception) -> None:
        """Record that every connection attempt failed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class CacheProbe(Protocol):
    """Domain probe for cache store operations."""

    def cache_flushed(self) -> None:
        """Record that the cache store was flushed."""
        ...

    def cache_key_deleted(self, key: str) -> None:
        """Record that a cache key was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> CacheProbe:
        """Create a new probe with observation context bound."""
        ...


class _StructlogProbe:
    """Shared plumbing for structlog-backed probes."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()


class DefaultConnectionProbe(_StructlogProbe):
    """Default implementation of ConnectionProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def waiting_for_database(self, attempt: int, limit: int) -> None:
        """Record that a connection attempt is about to be made."""
        self._logger.info(
            "waiting_for_database",
            attempt=attempt,
            limit=limit,
            **self._get_context_kwargs(),
        )

    def connection_established(self, host: str, database: str) -> None:
        """Record that a database connection was successfully established."""
        self._logger.info(
            "database_connection_established",
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_attempt_failed(
        self, attempt: int, limit: int, error: Exception
    ) -> None:
        """Record that one connection attempt failed."""
        self._logger.warning(
            "database_connection_attempt_failed",
            attempt=attempt,
            limit=limit,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def database_unavailable(self, attempts: int, error: Exception) -> None:
        """Record that every connection attempt failed."""
        self._logger.error(
            "database_unavailable",
            attempts=attempts,
            error=str(error),
            **self._get_context_kwargs(),
        )


class DefaultCacheProbe(_StructlogProbe):
    """Default implementation of CacheProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultCacheProbe:
        """Create a new probe with observation context bound."""
        return DefaultCacheProbe(logger=self._logger, context=context)

    def cache_flushed(self) -> None:
        """Record that the cache store was flushed."""
        self._logger.info("cache_flushed", **self._get_context_kwargs())

    def cache_key_deleted(self, key: str) -> None:
        """Record that a cache key was deleted."""
        self._logger.debug(
            "cache_key_deleted",
            key=key,
            **self._get_context_kwargs(),
        )
