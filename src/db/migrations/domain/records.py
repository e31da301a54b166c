"""Rows of the Template and DemoBackup registries as value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from migrations.domain.model_list import ModelListEntry, pascal_to_kebab


def _new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class TemplateRecord:
    """A per-tenant table in the registry.

    ``definition`` is kept in token form; it is only substituted when
    applied to a tenant.
    """

    table_name: str
    position: int
    definition: dict[str, Any]
    timestamps: bool = False
    id: str = field(default_factory=_new_id)

    @property
    def model_name(self) -> str:
        return pascal_to_kebab(self.table_name)

    def to_model_list_entry(self) -> ModelListEntry:
        return ModelListEntry(self.table_name, self.model_name, self.timestamps)


@dataclass(frozen=True)
class DemoBackupRecord:
    """Snapshot of one demo tenant table."""

    table_name: str
    position: int
    rows: list[dict[str, Any]]
    id: str = field(default_factory=_new_id)
