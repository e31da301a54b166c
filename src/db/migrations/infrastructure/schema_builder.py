"""Build SQLAlchemy tables from resolved table definitions.

Type references map onto SQLAlchemy column types; ``UUIDV4`` and ``NOW``
are the two default generators. Every referenced table gets a placeholder
entry in the same ``MetaData`` so foreign keys compile without the target
table having been loaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Double,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID

from infrastructure.database.models import new_id
from migrations.domain.definitions import (
    TIMESTAMP_COLUMNS,
    ColumnDefinition,
    TableDefinition,
)
from migrations.domain.template_values import TypeReference, utc_now
from migrations.ports.exceptions import InvalidUsageError

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.types import TypeEngine

COLUMN_TYPES: dict[str, Callable[[], TypeEngine[Any]]] = {
    "STRING": lambda: String(255),
    "TEXT": Text,
    "UUID": lambda: UUID(as_uuid=False),
    "INTEGER": Integer,
    "BIGINT": BigInteger,
    "FLOAT": Float,
    "DOUBLE": Double,
    "DECIMAL": Numeric,
    "BOOLEAN": Boolean,
    "DATE": lambda: DateTime(timezone=True),
    "DATEONLY": Date,
    "JSON": JSON,
    "JSONB": JSONB,
}

DEFAULT_GENERATORS: dict[str, Callable[[], Any]] = {
    "UUIDV4": new_id,
    "NOW": utc_now,
}


def column_type(reference: TypeReference) -> TypeEngine[Any]:
    """Return the SQLAlchemy type named by a type reference."""
    try:
        return COLUMN_TYPES[reference.name]()
    except KeyError:
        raise InvalidUsageError(f"Unknown column type {reference.token}") from None


def _server_default(value: Any):
    # Literal defaults also go into the DDL so rows inserted outside the
    # toolchain get them.
    if isinstance(value, bool):
        return text("true" if value else "false")
    if isinstance(value, (int, float)):
        return text(str(value))
    if isinstance(value, str):
        return text("'%s'" % value.replace("'", "''"))
    return None


def _default_kwargs(definition: ColumnDefinition) -> dict[str, Any]:
    if not definition.has_default or definition.default is None:
        return {}
    value = definition.default
    if isinstance(value, TypeReference):
        try:
            return {"default": DEFAULT_GENERATORS[value.name]}
        except KeyError:
            raise InvalidUsageError(
                f"Unknown default generator {value.token} on {definition.name!r}"
            ) from None
    kwargs: dict[str, Any] = {"default": value}
    server_default = _server_default(value)
    if server_default is not None:
        kwargs["server_default"] = server_default
    return kwargs


def build_column(definition: ColumnDefinition, schema: str) -> Column[Any]:
    """Build one column; foreign keys default to ``schema``."""
    args: list[Any] = [definition.name, column_type(definition.type)]
    if definition.references is not None:
        reference = definition.references
        args.append(
            ForeignKey(
                f"{reference.schema or schema}.{reference.table}.{reference.column}",
                ondelete=definition.on_delete,
                onupdate=definition.on_update,
            )
        )
    return Column(
        *args,
        primary_key=definition.primary_key,
        nullable=definition.allow_null and not definition.primary_key,
        unique=definition.unique or None,
        autoincrement=definition.auto_increment,
        **_default_kwargs(definition),
    )


def _timestamp_column(name: str) -> Column[Any]:
    return Column(
        name,
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )


def _ensure_referenced_tables(
    metadata: MetaData, definition: TableDefinition, schema: str
) -> None:
    for column in definition.columns:
        reference = column.references
        if reference is None:
            continue
        target_schema = reference.schema or schema
        key = f"{target_schema}.{reference.table}"
        if reference.table == definition.name and target_schema == schema:
            continue
        if key in metadata.tables:
            target = metadata.tables[key]
            if reference.column not in target.c:
                target.append_column(Column(reference.column, column_type(column.type)))
            continue
        Table(
            reference.table,
            metadata,
            Column(reference.column, column_type(column.type)),
            schema=target_schema,
        )


def build_table(
    metadata: MetaData, definition: TableDefinition, schema: str
) -> Table:
    """Build ``definition`` as a table of ``schema`` inside ``metadata``."""
    _ensure_referenced_tables(metadata, definition, schema)
    columns = [build_column(column, schema) for column in definition.columns]
    if definition.timestamps:
        declared = {column.name for column in definition.columns}
        columns.extend(
            _timestamp_column(name) for name in TIMESTAMP_COLUMNS if name not in declared
        )
    return Table(definition.name, metadata, *columns, schema=schema)


def reflect_table(connection: Connection, table_name: str, schema: str) -> Table:
    """Load a table's columns from the database catalog."""
    return Table(table_name, MetaData(), schema=schema, autoload_with=connection)
