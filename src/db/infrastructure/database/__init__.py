"""Database infrastructure - shared connection primitives."""

from infrastructure.database.exceptions import (
    DatabaseError,
    DatabaseUnavailableError,
    TransactionError,
)

__all__ = [
    "DatabaseError",
    "DatabaseUnavailableError",
    "TransactionError",
]
