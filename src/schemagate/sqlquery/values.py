"""Column value to JSON conversion.

Each column carries a ColumnKind. Conversion dispatches on that closed set:

    INTEGER  -> number
    BOOLEAN  -> boolean
    FLOAT    -> number, or null when NaN/Infinity
    TEXT     -> string
    TEMPORAL -> ISO-8601 string
    OPAQUE   -> embedded JSON if the textual form parses, else string

SQL NULL (None) is always JSON null, whatever the kind.

The opaque fallback exists for driver types with no direct mapping
(PostgreSQL json/jsonb, NUMERIC as Decimal, arrays). It can read the text
"12" as the number 12; that ambiguity is accepted for opaque columns only.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any

from schemagate.contracts.enums import ColumnKind
from schemagate.contracts.rows import Column
from schemagate.contracts.self_describing import JSON, compact_json
from schemagate.core.json_utils import extract_json


def classify_value(value: Any) -> ColumnKind:
    """Infer the ColumnKind of a Python driver value.

    bool is checked before int (bool is an int subclass), and datetime before
    date for the same reason. None classifies as OPAQUE; it converts to null
    regardless of kind.
    """
    if isinstance(value, bool):
        return ColumnKind.BOOLEAN
    if isinstance(value, int):
        return ColumnKind.INTEGER
    if isinstance(value, float):
        return ColumnKind.FLOAT
    if isinstance(value, str):
        return ColumnKind.TEXT
    if isinstance(value, datetime | date | time):
        return ColumnKind.TEMPORAL
    return ColumnKind.OPAQUE


def column_to_json(column: Column) -> JSON:
    """Convert one column value to a JSON value.

    Raises:
        TypeError, ValueError, UnicodeDecodeError: If the value does not fit
            its declared kind. Callers wrap these as RowReadError.
    """
    value = column.value
    if value is None:
        return None

    kind = column.kind
    if kind == ColumnKind.INTEGER:
        return int(value)
    if kind == ColumnKind.BOOLEAN:
        return bool(value)
    if kind == ColumnKind.FLOAT:
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return None
        return number
    if kind == ColumnKind.TEXT:
        return str(value)
    if kind == ColumnKind.TEMPORAL:
        return _temporal_to_iso(value)
    if kind == ColumnKind.OPAQUE:
        return _opaque_to_json(value)
    raise AssertionError(f"Unhandled ColumnKind: {kind!r}")


def _temporal_to_iso(value: Any) -> str:
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    # Some drivers hand temporal columns over as pre-formatted text
    return str(value)


def _opaque_to_json(value: Any) -> JSON:
    text = _opaque_text(value)
    try:
        return extract_json(text)
    except ValueError:
        return text


def _opaque_text(value: Any) -> str:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode("utf-8")
    if isinstance(value, dict | list):
        # Drivers that decode json columns themselves; re-encode so the
        # embedded-JSON path applies uniformly
        return compact_json(value)
    return str(value)
