"""Errors raised while reading definitions and placeholders.

``InvalidUsageError`` marks programmer mistakes in a migration module (an
unknown anchor table, an unset tenant, a malformed definition). Those should
fail the migration loudly rather than be handled.
"""

from shared_kernel.exceptions import MigrationError


class InvalidUsageError(MigrationError):
    """Raised when a helper is called with arguments it cannot act on."""

    pass
