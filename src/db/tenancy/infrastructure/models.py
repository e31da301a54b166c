"""SQLAlchemy ORM model for the TenantInfo table.

Lives in the public schema; one row per tenant schema.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, new_id


class TenantInfoModel(Base):
    """ORM model for the public ``TenantInfo`` table."""

    __tablename__ = "TenantInfo"
    __table_args__ = {"schema": "public"}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    schema_name: Mapped[str] = mapped_column(
        "schemaName", String(255), nullable=False, unique=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantInfoModel(id={self.id}, schema_name={self.schema_name})>"
