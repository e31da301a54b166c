"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        command: Toolchain command being run (squash, wipe, migrate).
        migration: Name of the migration file being applied (if applicable).
        tenant: Tenant schema being operated on (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(command="migrate").with_migration(
            "20200101000000_initial_seed"
        )
        probe = DefaultMigrationRunnerProbe().with_context(context)
    """

    command: str | None = None
    migration: str | None = None
    tenant: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.command is not None:
            result["command"] = self.command
        if self.migration is not None:
            result["migration"] = self.migration
        if self.tenant is not None:
            result["tenant"] = self.tenant
        result.update(self.extra)
        return result

    def with_migration(self, migration: str) -> ObservationContext:
        """Create a new context with the migration name set."""
        return replace(self, migration=migration)

    def with_tenant(self, tenant: str) -> ObservationContext:
        """Create a new context with the tenant set."""
        return replace(self, tenant=tenant)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
