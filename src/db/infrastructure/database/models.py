"""SQLAlchemy declarative base for the public-schema bookkeeping tables.

Per-tenant tables are not declared here: their shape lives in the Template
registry and is built at runtime. Only the fixed public tables (TenantInfo,
Template, DemoBackup, MigrationMeta) are mapped classes.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    """Generate a primary key for public bookkeeping rows."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for the public-schema ORM models.

    Table names keep the PascalCase / camelCase identifiers the backend
    already uses, so every model quotes them through explicit names.
    """

    type_annotation_map: dict[type, Any] = {}
