# tests/sqlquery/test_output.py
"""Tests for row-to-context conversion: shaping, row counts and enveloping."""

from decimal import Decimal
from typing import Any

import pytest

from schemagate.contracts.enums import ColumnKind, DescribeMode, ExpectedRows, PropertyNaming

USER_SCHEMA = "iglu:com.acme/user/jsonschema/1-0-0"


def _spec(describes: DescribeMode, expected: ExpectedRows, naming: PropertyNaming = PropertyNaming.AS_IS) -> Any:
    from schemagate.sqlquery.output import OutputSpec

    return OutputSpec(schema_uri=USER_SCHEMA, describe_mode=describes, expected_rows=expected, property_naming=naming)


def _rows(count: int) -> list[Any]:
    from schemagate.sqlquery.sources import row_from_mapping

    return [row_from_mapping({"user_id": i, "is_new": i % 2 == 0}) for i in range(count)]


class TestOutputSpecFromDict:
    def test_enrichment_shape(self) -> None:
        from schemagate.sqlquery.output import OutputSpec

        spec = OutputSpec.from_dict(
            {
                "json": {"schema": USER_SCHEMA, "describes": "EVERY_ROW", "propertyNames": "CAMEL_CASE"},
                "expectedRows": "AT_LEAST_ONE",
            }
        )

        assert spec.describe_mode == DescribeMode.EVERY_ROW
        assert spec.expected_rows == ExpectedRows.AT_LEAST_ONE
        assert spec.property_naming == PropertyNaming.CAMEL_CASE
        assert spec.schema_key.name == "user"

    def test_missing_key(self) -> None:
        from schemagate.contracts.errors import ConfigurationError
        from schemagate.sqlquery.output import OutputSpec

        with pytest.raises(ConfigurationError, match="missing key"):
            OutputSpec.from_dict({"json": {"schema": USER_SCHEMA, "describes": "ALL_ROWS"}, "expectedRows": "AT_MOST_ONE"})

    def test_unknown_mode(self) -> None:
        from schemagate.contracts.errors import ConfigurationError
        from schemagate.sqlquery.output import OutputSpec

        with pytest.raises(ConfigurationError, match="unknown value for describes"):
            OutputSpec.from_dict(
                {
                    "json": {"schema": USER_SCHEMA, "describes": "ANY_ROWS", "propertyNames": "AS_IS"},
                    "expectedRows": "AT_MOST_ONE",
                }
            )

    def test_malformed_schema(self) -> None:
        from schemagate.contracts.errors import ConfigurationError
        from schemagate.sqlquery.output import OutputSpec

        with pytest.raises(ConfigurationError, match="Invalid schema URI"):
            OutputSpec.from_dict(
                {
                    "json": {"schema": "iglu:com.acme/user/jsonschema", "describes": "ALL_ROWS", "propertyNames": "AS_IS"},
                    "expectedRows": "AT_MOST_ONE",
                }
            )

    def test_json_must_be_dict(self) -> None:
        from schemagate.contracts.errors import ConfigurationError
        from schemagate.sqlquery.output import OutputSpec

        with pytest.raises(ConfigurationError):
            OutputSpec.from_dict({"json": "nope", "expectedRows": "AT_MOST_ONE"})


class TestConvert:
    def test_all_rows_single_object_with_camel_case(self) -> None:
        """One row, ALL_ROWS, AT_MOST_ONE, CAMEL_CASE: a lone object."""
        from schemagate.sqlquery.output import convert
        from schemagate.sqlquery.sources import row_from_mapping

        spec = _spec(DescribeMode.ALL_ROWS, ExpectedRows.AT_MOST_ONE, PropertyNaming.CAMEL_CASE)
        result = convert([row_from_mapping({"user_id": 7, "is_new": True})], spec)

        assert result.is_success
        assert [c.to_json() for c in result.contexts] == [{"schema": USER_SCHEMA, "data": {"userId": 7, "isNew": True}}]

    def test_all_rows_at_least_zero_empty_is_one_empty_array(self) -> None:
        from schemagate.sqlquery.output import convert

        result = convert([], _spec(DescribeMode.ALL_ROWS, ExpectedRows.AT_LEAST_ZERO))

        assert result.is_success
        assert [c.data for c in result.contexts] == [[]]

    def test_all_rows_at_most_one_empty_is_no_context(self) -> None:
        from schemagate.sqlquery.output import convert

        result = convert([], _spec(DescribeMode.ALL_ROWS, ExpectedRows.AT_MOST_ONE))

        assert result.is_success
        assert result.contexts == []

    def test_all_rows_multi_wraps_array(self) -> None:
        from schemagate.sqlquery.output import convert

        result = convert(_rows(3), _spec(DescribeMode.ALL_ROWS, ExpectedRows.AT_LEAST_ONE))

        assert len(result.contexts) == 1
        assert [obj["user_id"] for obj in result.contexts[0].data] == [0, 1, 2]

    def test_every_row_one_context_per_row(self) -> None:
        from schemagate.sqlquery.output import convert

        result = convert(_rows(3), _spec(DescribeMode.EVERY_ROW, ExpectedRows.AT_LEAST_ZERO))

        assert [c.data["user_id"] for c in result.contexts] == [0, 1, 2]
        assert all(c.schema.to_schema_uri() == USER_SCHEMA for c in result.contexts)

    def test_every_row_empty_is_no_context(self) -> None:
        from schemagate.sqlquery.output import convert

        result = convert([], _spec(DescribeMode.EVERY_ROW, ExpectedRows.AT_LEAST_ZERO))
        assert result.contexts == []

    @pytest.mark.parametrize(
        ("expected", "count", "message"),
        [
            (ExpectedRows.EXACTLY_ONE, 0, "SQL Query Enrichment: exactly one row was expected"),
            (ExpectedRows.EXACTLY_ONE, 2, "SQL Query Enrichment: exactly one row was expected"),
            (ExpectedRows.AT_MOST_ONE, 2, "SQL Query Enrichment: at most one row was expected"),
            (ExpectedRows.AT_LEAST_ONE, 0, "SQL Query Enrichment: at least one row was expected. 0 given instead"),
        ],
    )
    @pytest.mark.parametrize("describes", list(DescribeMode))
    def test_row_count_mismatch(self, describes: DescribeMode, expected: ExpectedRows, count: int, message: str) -> None:
        from schemagate.sqlquery.output import convert

        result = convert(_rows(count), _spec(describes, expected))

        assert not result.is_success
        assert result.contexts == []
        assert result.error is not None
        assert result.error.count == count
        assert result.error.message == message

    def test_null_values_kept(self) -> None:
        from schemagate.sqlquery.output import convert
        from schemagate.sqlquery.sources import row_from_mapping

        result = convert([row_from_mapping({"name": None})], _spec(DescribeMode.ALL_ROWS, ExpectedRows.EXACTLY_ONE))
        assert result.contexts[0].data == {"name": None}


class TestRowSourceHandling:
    def test_source_drained_and_closed(self) -> None:
        from schemagate.sqlquery.output import convert
        from schemagate.sqlquery.sources import ListRowSource

        source = ListRowSource(_rows(2))
        result = convert(source, _spec(DescribeMode.EVERY_ROW, ExpectedRows.AT_LEAST_ONE))

        assert len(result.contexts) == 2
        assert source.closed

    def test_conversion_failure_raises_and_closes(self) -> None:
        from schemagate.contracts.enums import ColumnKind
        from schemagate.contracts.errors import RowReadError
        from schemagate.contracts.rows import Column
        from schemagate.sqlquery.output import convert
        from schemagate.sqlquery.sources import ListRowSource

        bad_row = (Column(label="age", value="forty", kind=ColumnKind.INTEGER),)
        source = ListRowSource([*_rows(1), bad_row])

        with pytest.raises(RowReadError) as exc_info:
            convert(source, _spec(DescribeMode.EVERY_ROW, ExpectedRows.AT_LEAST_ZERO))

        assert exc_info.value.row_index == 1
        assert exc_info.value.column == "age"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert source.closed

    @pytest.mark.parametrize(
        ("kind", "value"),
        [
            (ColumnKind.FLOAT, 10**400),
            (ColumnKind.INTEGER, float("inf")),
            (ColumnKind.INTEGER, Decimal("Infinity")),
        ],
    )
    def test_overflow_raises_row_read_error_and_closes(self, kind: ColumnKind, value: object) -> None:
        from schemagate.contracts.errors import RowReadError
        from schemagate.contracts.rows import Column
        from schemagate.sqlquery.output import convert
        from schemagate.sqlquery.sources import ListRowSource

        source = ListRowSource([(Column(label="score", value=value, kind=kind),)])

        with pytest.raises(RowReadError) as exc_info:
            convert(source, _spec(DescribeMode.EVERY_ROW, ExpectedRows.AT_LEAST_ZERO))

        assert exc_info.value.row_index == 0
        assert exc_info.value.column == "score"
        assert isinstance(exc_info.value.__cause__, OverflowError)
        assert source.closed

    def test_read_failure_propagates_and_closes(self) -> None:
        from schemagate.contracts.errors import RowReadError
        from schemagate.sqlquery.output import convert

        class FailingSource:
            closed = False

            def fetch_next(self) -> Any:
                raise RowReadError("connection reset", row_index=0)

            def close(self) -> None:
                self.closed = True

        source = FailingSource()
        with pytest.raises(RowReadError, match="connection reset"):
            convert(source, _spec(DescribeMode.ALL_ROWS, ExpectedRows.AT_LEAST_ZERO))
        assert source.closed

    def test_closed_list_source_refuses_reads(self) -> None:
        from schemagate.contracts.errors import RowReadError
        from schemagate.sqlquery.sources import ListRowSource

        source = ListRowSource.from_mappings([{"a": 1}])
        source.close()

        with pytest.raises(RowReadError):
            source.fetch_next()
