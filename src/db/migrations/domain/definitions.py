"""Column and table definitions built from resolved attribute maps.

A definition is ``{column name: attribute map}`` after placeholder
substitution for one tenant. Attribute names follow the camelCase keys of
the stored JSON (``primaryKey``, ``allowNull``, ``defaultValue``...). Other keys
are validation hints for the application and play no part in the table
shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from migrations.domain.template_values import TypeReference
from migrations.domain.exceptions import InvalidUsageError

TIMESTAMP_COLUMNS = ("createdAt", "updatedAt")


@dataclass(frozen=True)
class ForeignKeyReference:
    """Target of a foreign key; ``schema`` None means the referencing schema."""

    table: str
    column: str = "id"
    schema: str | None = None

    @classmethod
    def from_attribute(cls, raw: Any) -> ForeignKeyReference:
        if not isinstance(raw, dict) or "model" not in raw:
            raise InvalidUsageError(f"Malformed references attribute: {raw!r}")
        model = raw["model"]
        column = raw.get("key", "id")
        if isinstance(model, dict):
            if "tableName" not in model:
                raise InvalidUsageError(f"references.model lacks tableName: {raw!r}")
            return cls(table=model["tableName"], column=column, schema=model.get("schema"))
        return cls(table=str(model), column=column)


@dataclass(frozen=True)
class ColumnDefinition:
    """Shape of one column."""

    name: str
    type: TypeReference
    primary_key: bool = False
    allow_null: bool = True
    unique: bool = False
    auto_increment: bool = False
    default: Any = None
    has_default: bool = False
    references: ForeignKeyReference | None = None
    on_delete: str | None = None
    on_update: str | None = None

    @classmethod
    def from_attributes(cls, name: str, attributes: Any) -> ColumnDefinition:
        """Build from one resolved attribute map.

        A bare type reference is shorthand for ``{"type": ...}``.
        """
        if isinstance(attributes, TypeReference):
            attributes = {"type": attributes}
        if not isinstance(attributes, dict):
            raise InvalidUsageError(
                f"Column {name!r} must map to an attribute object, got {attributes!r}"
            )
        column_type = attributes.get("type")
        if not isinstance(column_type, TypeReference):
            raise InvalidUsageError(f"Column {name!r} has no type reference")

        primary_key = bool(attributes.get("primaryKey", False))
        references = attributes.get("references")
        return cls(
            name=name,
            type=column_type,
            primary_key=primary_key,
            allow_null=bool(attributes.get("allowNull", not primary_key)),
            unique=bool(attributes.get("unique", False)),
            auto_increment=bool(attributes.get("autoIncrement", False)),
            default=attributes.get("defaultValue"),
            has_default="defaultValue" in attributes,
            references=(
                ForeignKeyReference.from_attribute(references)
                if references is not None
                else None
            ),
            on_delete=attributes.get("onDelete"),
            on_update=attributes.get("onUpdate"),
        )


@dataclass(frozen=True)
class TableDefinition:
    """Shape of one per-tenant table."""

    name: str
    columns: tuple[ColumnDefinition, ...] = field(default_factory=tuple)
    timestamps: bool = False

    @classmethod
    def from_attributes(
        cls, name: str, attributes: dict[str, Any], timestamps: bool = False
    ) -> TableDefinition:
        """Build from a resolved ``{column: attributes}`` map."""
        if not isinstance(attributes, dict) or not attributes:
            raise InvalidUsageError(f"Definition of {name!r} has no columns")
        columns = tuple(
            ColumnDefinition.from_attributes(column, column_attributes)
            for column, column_attributes in attributes.items()
        )
        return cls(name=name, columns=columns, timestamps=timestamps)

    @property
    def column_names(self) -> list[str]:
        names = [column.name for column in self.columns]
        if self.timestamps:
            names.extend(name for name in TIMESTAMP_COLUMNS if name not in names)
        return names
