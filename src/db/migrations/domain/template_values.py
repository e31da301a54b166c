"""Typed placeholder values for table definitions.

Definitions are stored as JSON where a few string tokens stand for values
only known when a definition is applied to a tenant:

- ``{{TENANT}}``: the tenant schema name
- ``{{NEW_DATE}}``: the current timestamp
- ``{{NEW_DATE_PLUS_SIX_MONTHS}}``: six calendar months from now
- ``{{TypeRef.X}}``: a column type or default generator (``{{Sequelize.X}}``
  is accepted as a legacy spelling)

``parse_template`` turns the raw JSON into a tree of typed values,
``substitute`` resolves the tenant and clock dependent ones, and
``to_serializable`` turns a tree back into the token form kept on disk and in
the Template table. Type references are left typed by ``substitute``; the
infrastructure layer maps them to database types.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, Union

TENANT_TOKEN = "{{TENANT}}"
NEW_DATE_TOKEN = "{{NEW_DATE}}"
NEW_DATE_PLUS_SIX_MONTHS_TOKEN = "{{NEW_DATE_PLUS_SIX_MONTHS}}"

_TYPE_REFERENCE_PATTERN = re.compile(r"\{\{(?:TypeRef|Sequelize)\.([A-Z][A-Z0-9_]*)\}\}")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months, clamping the day.

    31 January plus one month is 28 (or 29) February.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class LiteralValue:
    """A plain JSON value kept as is."""

    value: Any


@dataclass(frozen=True)
class TenantReference:
    """Resolves to the name of the tenant the definition is applied to."""


@dataclass(frozen=True)
class CurrentTimestamp:
    """Resolves to the clock's current time."""


@dataclass(frozen=True)
class TimestampOffset:
    """Resolves to the clock's current time shifted by calendar months."""

    months: int = 6


@dataclass(frozen=True)
class TypeReference:
    """Names a column type (``STRING``) or default generator (``UUIDV4``)."""

    name: str

    @property
    def token(self) -> str:
        return "{{TypeRef.%s}}" % self.name


TemplateValue = Union[
    LiteralValue, TenantReference, CurrentTimestamp, TimestampOffset, TypeReference
]

_TEMPLATE_VALUE_TYPES = (
    LiteralValue,
    TenantReference,
    CurrentTimestamp,
    TimestampOffset,
    TypeReference,
)


def parse_value(raw: Any) -> TemplateValue:
    """Parse one scalar into its template-value variant."""
    if isinstance(raw, _TEMPLATE_VALUE_TYPES):
        return raw
    if isinstance(raw, str):
        if raw == TENANT_TOKEN:
            return TenantReference()
        if raw == NEW_DATE_TOKEN:
            return CurrentTimestamp()
        if raw == NEW_DATE_PLUS_SIX_MONTHS_TOKEN:
            return TimestampOffset(months=6)
        match = _TYPE_REFERENCE_PATTERN.fullmatch(raw)
        if match:
            return TypeReference(match.group(1))
    return LiteralValue(raw)


def parse_template(raw: Any) -> Any:
    """Parse a raw definition tree, recursing into maps and lists.

    Values that are already typed pass through unchanged, so migration
    modules may mix tokens and typed values freely.
    """
    if isinstance(raw, dict):
        return {key: parse_template(value) for key, value in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [parse_template(value) for value in raw]
    return parse_value(raw)


def resolve(value: TemplateValue, tenant: str, clock: Clock = utc_now) -> Any:
    """Resolve one template value for a tenant.

    Type references resolve to themselves.
    """
    if isinstance(value, LiteralValue):
        return value.value
    if isinstance(value, TenantReference):
        return tenant
    if isinstance(value, CurrentTimestamp):
        return clock()
    if isinstance(value, TimestampOffset):
        return add_months(clock(), value.months)
    return value


def substitute(tree: Any, tenant: str, clock: Clock = utc_now) -> Any:
    """Resolve every template value of a parsed tree for a tenant."""
    if isinstance(tree, dict):
        return {key: substitute(value, tenant, clock) for key, value in tree.items()}
    if isinstance(tree, list):
        return [substitute(value, tenant, clock) for value in tree]
    return resolve(tree, tenant, clock)


def to_serializable(tree: Any) -> Any:
    """Render a parsed tree back to its JSON token form."""
    if isinstance(tree, dict):
        return {key: to_serializable(value) for key, value in tree.items()}
    if isinstance(tree, list):
        return [to_serializable(value) for value in tree]
    if isinstance(tree, LiteralValue):
        return tree.value
    if isinstance(tree, TenantReference):
        return TENANT_TOKEN
    if isinstance(tree, CurrentTimestamp):
        return NEW_DATE_TOKEN
    if isinstance(tree, TimestampOffset):
        if tree.months != 6:
            raise ValueError(f"No token for a {tree.months}-month offset")
        return NEW_DATE_PLUS_SIX_MONTHS_TOKEN
    if isinstance(tree, TypeReference):
        return tree.token
    return tree
