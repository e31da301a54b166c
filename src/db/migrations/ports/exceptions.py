"""Exceptions for the migrations bounded context."""

from migrations.domain.exceptions import InvalidUsageError
from shared_kernel.exceptions import MigrationError

__all__ = [
    "InvalidUsageError",
    "MigrationFailedError",
]


class MigrationFailedError(MigrationError):
    """Raised when a migration module's ``up`` or ``down`` fails.

    The original exception is kept as ``__cause__``; the transaction of the
    migration has been rolled back by the time this propagates.
    """

    def __init__(self, migration: str, direction: str, cause: BaseException):
        super().__init__(f"Migration {migration} ({direction}) failed: {cause}")
        self.migration = migration
        self.direction = direction
        self.cause = cause
