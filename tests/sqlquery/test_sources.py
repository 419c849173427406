# tests/sqlquery/test_sources.py
"""Tests for the SQLAlchemy row source against in-memory SQLite."""

from collections.abc import Iterator

import pytest
from sqlalchemy import Connection, create_engine, text

from schemagate.contracts.enums import DescribeMode, ExpectedRows, PropertyNaming


@pytest.fixture
def connection() -> Iterator[Connection]:
    engine = create_engine("sqlite:///:memory:")
    with engine.connect() as conn:
        conn.execute(text("CREATE TABLE users (user_id INTEGER, user_name TEXT, score REAL, prefs TEXT)"))
        conn.execute(
            text("INSERT INTO users VALUES (1, 'ann', 1.5, '{\"theme\": \"dark\"}'), (2, 'bob', NULL, NULL)"),
        )
        yield conn
    engine.dispose()


class TestSqlAlchemyRowSource:
    def test_rows_and_labels(self, connection: Connection) -> None:
        from schemagate.contracts.enums import ColumnKind
        from schemagate.sqlquery.sources import execute_query

        source = execute_query(connection, "SELECT user_id, user_name, score FROM users ORDER BY user_id")

        assert source.labels == ["user_id", "user_name", "score"]
        first = source.fetch_next()
        assert first is not None
        assert [(c.label, c.value, c.kind) for c in first] == [
            ("user_id", 1, ColumnKind.INTEGER),
            ("user_name", "ann", ColumnKind.TEXT),
            ("score", 1.5, ColumnKind.FLOAT),
        ]
        assert source.fetch_next() is not None
        assert source.fetch_next() is None
        source.close()

    def test_bound_parameters(self, connection: Connection) -> None:
        from schemagate.sqlquery.sources import execute_query

        source = execute_query(connection, "SELECT user_name FROM users WHERE user_id = :uid", {"uid": 2})

        row = source.fetch_next()
        assert row is not None
        assert row[0].value == "bob"
        source.close()

    def test_failed_statement_is_row_read_error(self, connection: Connection) -> None:
        from schemagate.contracts.errors import RowReadError
        from schemagate.sqlquery.sources import execute_query

        with pytest.raises(RowReadError, match="Query failed"):
            execute_query(connection, "SELECT * FROM no_such_table")

    def test_end_to_end_conversion(self, connection: Connection) -> None:
        from schemagate.sqlquery.output import OutputSpec, convert
        from schemagate.sqlquery.sources import execute_query

        spec = OutputSpec(
            schema_uri="iglu:com.acme/user/jsonschema/1-0-0",
            describe_mode=DescribeMode.EVERY_ROW,
            expected_rows=ExpectedRows.AT_LEAST_ONE,
            property_naming=PropertyNaming.CAMEL_CASE,
        )

        result = convert(execute_query(connection, "SELECT * FROM users ORDER BY user_id"), spec)

        assert result.is_success
        assert [c.data for c in result.contexts] == [
            {"userId": 1, "userName": "ann", "score": 1.5, "prefs": '{"theme": "dark"}'},
            {"userId": 2, "userName": "bob", "score": None, "prefs": None},
        ]
