"""SQLAlchemy ORM models for the public bookkeeping tables.

Template and DemoBackup are created by the bootstrap migration; either may
be missing on a partially migrated database, so callers check for them
before use. MigrationMeta is owned by the migration runner.
"""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, new_id


class TemplateModel(Base):
    """ORM model for the ``Template`` registry of per-tenant tables."""

    __tablename__ = "Template"
    __table_args__ = {"schema": "public"}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    table_name: Mapped[str] = mapped_column(
        "tableName", String(255), nullable=False, unique=True
    )
    timestamps: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TemplateModel(table_name={self.table_name}, position={self.position})>"


class DemoBackupModel(Base):
    """ORM model for the ``DemoBackup`` snapshot of the demo tenant."""

    __tablename__ = "DemoBackup"
    __table_args__ = {"schema": "public"}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    table_name: Mapped[str] = mapped_column("tableName", String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    contents: Mapped[str] = mapped_column(Text, nullable=False)


class MigrationMetaModel(Base):
    """ORM model for the runner's ``MigrationMeta`` bookkeeping table."""

    __tablename__ = "MigrationMeta"
    __table_args__ = {"schema": "public"}

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
