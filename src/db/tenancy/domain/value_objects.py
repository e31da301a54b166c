"""Value objects for the tenancy domain.

A tenant is an isolated customer whose data lives in its own schema. The
schema name doubles as the tenant's name everywhere in the toolchain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

TENANT_LIST_SEPARATOR = ","


@dataclass(frozen=True)
class TenantInfo:
    """One registered tenant: identifier plus schema name."""

    id: str
    schema_name: str

    def __post_init__(self) -> None:
        if not self.schema_name:
            raise ValueError("Tenant schema name must not be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TenantInfo:
        """Build from the ``{id, schemaName}`` fixture shape."""
        return cls(id=str(data["id"]), schema_name=data["schemaName"])

    def to_dict(self) -> dict[str, str]:
        """Serialize to the ``{id, schemaName}`` fixture shape."""
        return {"id": self.id, "schemaName": self.schema_name}


def parse_tenant_list(value: str | None) -> list[str]:
    """Split a cached comma-joined tenant list; None or empty means no tenants."""
    if not value:
        return []
    return [name for name in value.split(TENANT_LIST_SEPARATOR) if name]


def join_tenant_list(names: Iterable[str]) -> str:
    """Join tenant names into the cached comma-joined form."""
    return TENANT_LIST_SEPARATOR.join(names)
