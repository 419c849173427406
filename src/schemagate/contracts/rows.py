"""Tabular rows as read from a row source.

A Row is an ordered tuple of Columns. Rows are consumed once and never
mutated; the converter turns each one into a flat JSON object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from schemagate.contracts.enums import ColumnKind


@dataclass(frozen=True, slots=True)
class Column:
    """One column value of a row.

    Attributes:
        label: Column label as reported by the source
        value: Native value (None for SQL NULL)
        kind: Native value category, drives JSON conversion
    """

    label: str
    value: Any
    kind: ColumnKind


type Row = tuple[Column, ...]


@runtime_checkable
class RowSource(Protocol):
    """Sequential pull of one query's result rows.

    The converter calls fetch_next() until it returns None, then close().
    close() is called even when reading or shaping fails.
    """

    def fetch_next(self) -> Row | None:
        """Return the next row, or None when exhausted.

        Raises:
            RowReadError: If the row cannot be read
        """
        ...

    def close(self) -> None: ...
