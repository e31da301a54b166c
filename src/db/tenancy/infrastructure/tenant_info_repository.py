"""PostgreSQL access to the TenantInfo table.

Statements run through the caller's transaction handle so tenant rows are
written atomically with the schema changes that create or drop the tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from tenancy.domain.value_objects import TenantInfo
from tenancy.infrastructure.models import TenantInfoModel

if TYPE_CHECKING:
    from infrastructure.database.transaction import TransactionHandle

_table = TenantInfoModel.__table__


class TenantInfoRepository:
    """Reads and writes TenantInfo rows inside one transaction."""

    def __init__(self, transaction: TransactionHandle) -> None:
        self._transaction = transaction

    async def create_table(self) -> None:
        """Create the TenantInfo table when it does not exist."""
        await self._transaction.run_sync(_table.create, checkfirst=True)

    async def drop_table(self) -> None:
        """Drop the TenantInfo table if it exists."""
        await self._transaction.run_sync(_table.drop, checkfirst=True)

    async def list_all(self) -> list[TenantInfo]:
        """Return every tenant, ordered by schema name."""
        result = await self._transaction.execute(
            select(_table.c.id, _table.c.schemaName).order_by(_table.c.schemaName)
        )
        return [
            TenantInfo(id=str(row.id), schema_name=row.schemaName)
            for row in result
        ]

    async def schema_names(self) -> list[str]:
        """Return the schema names of every tenant."""
        return [tenant.schema_name for tenant in await self.list_all()]

    async def add(self, tenant: TenantInfo) -> None:
        """Insert one tenant row."""
        await self._transaction.execute(
            insert(_table).values(id=tenant.id, schemaName=tenant.schema_name)
        )

    async def remove(self, tenant: TenantInfo) -> None:
        """Delete one tenant row by id."""
        await self._transaction.execute(delete(_table).where(_table.c.id == tenant.id))
