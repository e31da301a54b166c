"""Fixture files under the seeds directory.

Layout::

    seed-list.json                     tenants to create
    models/list.json                   per-tenant tables in apply order
    models/defs/<model>.json           one definition per table
    tenants/<schema>/<model>.json      rows to insert per tenant and table

Squash writes these files; the bootstrap migration and the Seed Helper read
them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from migrations.domain.model_list import ModelListEntry
from migrations.infrastructure import serialization
from tenancy.domain.value_objects import TenantInfo


class FixtureStore:
    """Reads and writes the fixture files of one seeds directory."""

    def __init__(self, seeds_dir: Path) -> None:
        self._seeds_dir = Path(seeds_dir)

    @property
    def seeds_dir(self) -> Path:
        return self._seeds_dir

    @property
    def seed_list_path(self) -> Path:
        return self._seeds_dir / "seed-list.json"

    @property
    def model_list_path(self) -> Path:
        return self._seeds_dir / "models" / "list.json"

    @property
    def definitions_dir(self) -> Path:
        return self._seeds_dir / "models" / "defs"

    def definition_path(self, model_name: str) -> Path:
        return self.definitions_dir / f"{model_name}.json"

    def tenant_dir(self, schema: str) -> Path:
        return self._seeds_dir / "tenants" / schema

    def tenant_rows_path(self, schema: str, model_name: str) -> Path:
        return self.tenant_dir(schema) / f"{model_name}.json"

    @staticmethod
    def _read(path: Path) -> Any:
        return serialization.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _write(path: Path, value: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            serialization.dumps(value, indent=serialization.FIXTURE_INDENT) + "\n",
            encoding="utf-8",
        )

    def read_seed_list(self) -> list[TenantInfo]:
        return [TenantInfo.from_dict(item) for item in self._read(self.seed_list_path)]

    def write_seed_list(self, tenants: Iterable[TenantInfo]) -> None:
        self._write(self.seed_list_path, [tenant.to_dict() for tenant in tenants])

    def read_model_list(self) -> list[ModelListEntry]:
        return [
            ModelListEntry.from_dict(item) for item in self._read(self.model_list_path)
        ]

    def write_model_list(self, entries: Iterable[ModelListEntry]) -> None:
        self._write(self.model_list_path, [entry.to_dict() for entry in entries])

    def read_definition(self, model_name: str) -> dict[str, Any]:
        return self._read(self.definition_path(model_name))

    def write_definition(self, model_name: str, definition: dict[str, Any]) -> None:
        self._write(self.definition_path(model_name), definition)

    def read_tenant_rows(
        self, schema: str, model_name: str
    ) -> list[dict[str, Any]] | None:
        """Return fixture rows, or None when the tenant has no file for the model."""
        path = self.tenant_rows_path(schema, model_name)
        if not path.is_file():
            return None
        return self._read(path)

    def write_tenant_rows(
        self, schema: str, model_name: str, rows: list[dict[str, Any]]
    ) -> None:
        self._write(self.tenant_rows_path(schema, model_name), rows)

    def clear(self, schemas: Iterable[str]) -> None:
        """Delete the seed list, model list, definitions and tenant rows."""
        self.seed_list_path.unlink(missing_ok=True)
        self.model_list_path.unlink(missing_ok=True)
        if self.definitions_dir.is_dir():
            for path in self.definitions_dir.glob("*.json"):
                path.unlink()
        for schema in schemas:
            tenant_dir = self.tenant_dir(schema)
            if tenant_dir.is_dir():
                for path in tenant_dir.glob("*.json"):
                    path.unlink()
