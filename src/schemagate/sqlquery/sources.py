"""Row sources: in-memory rows and SQLAlchemy query results.

Both implement the RowSource protocol (fetch_next/close). The row source
lifecycle belongs to the caller; convert() only drains and closes it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection, Result
from sqlalchemy.exc import SQLAlchemyError

from schemagate.contracts.errors import RowReadError
from schemagate.contracts.rows import Column, Row
from schemagate.sqlquery.values import classify_value


def row_from_mapping(mapping: Mapping[str, Any]) -> Row:
    """Build a Row from a label -> value mapping, inferring column kinds."""
    return tuple(Column(label=label, value=value, kind=classify_value(value)) for label, value in mapping.items())


class ListRowSource:
    """RowSource over rows already in memory."""

    def __init__(self, rows: Iterable[Row]) -> None:
        self._rows: Iterator[Row] = iter(rows)
        self.closed = False

    @classmethod
    def from_mappings(cls, mappings: Iterable[Mapping[str, Any]]) -> ListRowSource:
        return cls(row_from_mapping(m) for m in mappings)

    def fetch_next(self) -> Row | None:
        if self.closed:
            raise RowReadError("Row source is closed")
        return next(self._rows, None)

    def close(self) -> None:
        self.closed = True


class SqlAlchemyRowSource:
    """RowSource over an SQLAlchemy Result.

    Column labels come from Result.keys(); column kinds are inferred from
    each Python value returned by the driver (see classify_value).
    Driver errors while fetching are raised as RowReadError.
    """

    def __init__(self, result: Result[Any]) -> None:
        self._result = result
        self._labels: list[str] = list(result.keys())
        self._row_index = 0

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    def fetch_next(self) -> Row | None:
        try:
            record = self._result.fetchone()
        except SQLAlchemyError as e:
            raise RowReadError(f"Failed to fetch row {self._row_index}: {e}", row_index=self._row_index) from e
        if record is None:
            return None
        self._row_index += 1
        return tuple(
            Column(label=label, value=value, kind=classify_value(value)) for label, value in zip(self._labels, record, strict=True)
        )

    def close(self) -> None:
        self._result.close()


def execute_query(
    connection: Connection,
    sql: str,
    params: Mapping[str, Any] | None = None,
) -> SqlAlchemyRowSource:
    """Run a parameterised SQL statement and return its rows as a RowSource.

    Parameters use SQLAlchemy's named style (``WHERE id = :user_id``).

    Raises:
        RowReadError: If the statement fails to execute
    """
    try:
        result = connection.execute(text(sql), dict(params or {}))
    except SQLAlchemyError as e:
        raise RowReadError(f"Query failed: {e}") from e
    return SqlAlchemyRowSource(result)
