"""Root of the toolchain's exception hierarchy.

Every error the toolchain raises on purpose derives from ``MigrationError``
so the CLI can report it without a traceback.
"""


class MigrationError(Exception):
    """Base exception for toolchain failures."""

    pass
