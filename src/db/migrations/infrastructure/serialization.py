"""JSON encoding of table rows for fixture files and DemoBackup contents."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

FIXTURE_INDENT = 2


def _encode_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(value: Any, indent: int | None = None) -> str:
    """Encode rows or definitions; timestamps become ISO-8601 strings."""
    return json.dumps(value, default=_encode_value, indent=indent, ensure_ascii=False)


def loads(text: str) -> Any:
    """Decode a JSON document."""
    return json.loads(text)
