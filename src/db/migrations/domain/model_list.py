"""The ordered list of per-tenant tables.

Each entry names a table and the fixture model it is stored under. The list
order is the apply order: a table only references tables listed before it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def pascal_to_kebab(name: str) -> str:
    """Convert a PascalCase table name to its model name.

    >>> pascal_to_kebab("UserHasRole")
    'user-has-role'
    """
    return _WORD_BOUNDARY.sub("-", name).lower()


@dataclass(frozen=True)
class ModelListEntry:
    """One line of ``models/list.json``."""

    table_name: str
    model_name: str
    timestamps: bool = False

    @classmethod
    def for_table(cls, table_name: str, timestamps: bool = False) -> ModelListEntry:
        return cls(table_name, pascal_to_kebab(table_name), timestamps)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModelListEntry:
        table_name = data["tableName"]
        return cls(
            table_name=table_name,
            model_name=data.get("modelName") or pascal_to_kebab(table_name),
            timestamps=bool(data.get("timestamps", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tableName": self.table_name,
            "modelName": self.model_name,
            "timestamps": self.timestamps,
        }


def splice_after(order: list[str], name: str, insert_after: str | None) -> list[str]:
    """Return ``order`` with ``name`` placed right after ``insert_after``.

    None, or an anchor missing from ``order``, puts ``name`` first.
    """
    result = [entry for entry in order if entry != name]
    if insert_after is None or insert_after not in result:
        return [name, *result]
    index = result.index(insert_after) + 1
    return [*result[:index], name, *result[index:]]
