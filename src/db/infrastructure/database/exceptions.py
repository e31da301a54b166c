"""Database-specific exceptions shared by the toolchain."""

from shared_kernel.exceptions import MigrationError


class DatabaseError(MigrationError):
    """Base exception for database operations."""

    pass


class DatabaseUnavailableError(DatabaseError):
    """Raised when the database cannot be reached after every retry."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class TransactionError(DatabaseError):
    """Raised when a statement is issued on a finished transaction."""

    pass
