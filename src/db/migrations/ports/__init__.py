"""Ports for the migrations bounded context."""

from migrations.ports.exceptions import (
    InvalidUsageError,
    MigrationFailedError,
)

__all__ = [
    "InvalidUsageError",
    "MigrationFailedError",
]
