"""Conversion of query result rows into self-describing JSON contexts.

Three steps, in this order:

1. Shape: every row becomes a flat JSON object (property names rewritten,
   values converted by column kind). Any read or shaping failure raises
   RowReadError and aborts the whole conversion.
2. Count: the shaped rows are checked against the expected-rows policy.
   A mismatch is returned as an InvalidRowCount, never raised.
3. Envelope: accepted rows are wrapped as {schema, data} documents
   according to the describe mode.

    describe   | policy                      | output
    -----------|-----------------------------|-----------------------------------
    ALL_ROWS   | EXACTLY_ONE / AT_MOST_ONE   | 0 or 1 document wrapping an object
    ALL_ROWS   | AT_LEAST_ONE / AT_LEAST_ZERO| 1 document wrapping an array
    EVERY_ROW  | any                         | 1 document per row

OutputSpec is immutable and built once per enrichment configuration; the
same instance is safely shared by concurrent conversions.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator

from schemagate.contracts.enums import (
    DescribeMode,
    ExpectedRows,
    PropertyNaming,
    parse_describe_mode,
    parse_expected_rows,
    parse_property_naming,
)
from schemagate.contracts.errors import ConfigurationError, RowReadError
from schemagate.contracts.results import ConversionResult
from schemagate.contracts.rows import Row, RowSource
from schemagate.contracts.schema_key import SchemaKey, SchemaKeyParseError
from schemagate.contracts.self_describing import JSON, SelfDescribingDocument
from schemagate.core.logging import get_logger
from schemagate.sqlquery.naming import transform_property_name
from schemagate.sqlquery.values import column_to_json

logger = get_logger(__name__)


class OutputSpec(BaseModel):
    """How query rows become self-describing contexts.

    Built from enrichment configuration with from_dict():

        {
          "json": {
            "schema": "iglu:com.acme/user/jsonschema/1-0-0",
            "describes": "ALL_ROWS",
            "propertyNames": "CAMEL_CASE"
          },
          "expectedRows": "AT_LEAST_ZERO"
        }
    """

    model_config = {"frozen": True, "extra": "forbid"}

    schema_uri: str = Field(description="Schema attached to every produced context")
    describe_mode: DescribeMode
    expected_rows: ExpectedRows
    property_naming: PropertyNaming = PropertyNaming.AS_IS

    @field_validator("schema_uri")
    @classmethod
    def validate_schema_uri(cls, v: str) -> str:
        try:
            SchemaKey.parse(v)
        except SchemaKeyParseError as e:
            raise ValueError(f"Invalid schema URI {v!r}: {e}") from e
        return v

    @property
    def schema_key(self) -> SchemaKey:
        return SchemaKey.parse(self.schema_uri)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create an OutputSpec from enrichment configuration.

        Args:
            config: {"json": {"schema", "describes", "propertyNames"}, "expectedRows"}

        Returns:
            Validated, immutable OutputSpec

        Raises:
            ConfigurationError: On a missing key, unknown mode or malformed schema URI
        """
        if not isinstance(config, dict):
            raise ConfigurationError(f"Invalid output configuration: expected a dict, got {type(config).__name__}.")
        json_config = config.get("json")
        if not isinstance(json_config, dict):
            raise ConfigurationError("Invalid output configuration: 'json' must be a dict.")

        try:
            return cls(
                schema_uri=json_config["schema"],
                describe_mode=parse_describe_mode(json_config["describes"]),
                expected_rows=parse_expected_rows(config["expectedRows"]),
                property_naming=parse_property_naming(json_config["propertyNames"]),
            )
        except KeyError as e:
            raise ConfigurationError(f"Invalid output configuration: missing key {e}.") from e
        except ValidationError as e:
            raise ConfigurationError(f"Invalid output configuration: {e}") from e

    def describe(self, data: JSON) -> SelfDescribingDocument:
        """Attach this spec's schema to a JSON value."""
        return SelfDescribingDocument(schema=self.schema_key, data=data)


def shape_row(row: Row, naming: PropertyNaming, *, row_index: int) -> dict[str, JSON]:
    """Turn one row into a flat JSON object.

    Raises:
        RowReadError: If any column value cannot be converted
    """
    shaped: dict[str, JSON] = {}
    for column in row:
        try:
            shaped[transform_property_name(column.label, naming)] = column_to_json(column)
        except (TypeError, ValueError, ArithmeticError, UnicodeDecodeError) as e:
            raise RowReadError(
                f"Cannot convert column {column.label!r} ({column.kind.value}) of row {row_index}: {e}",
                row_index=row_index,
                column=column.label,
            ) from e
    return shaped


def _shape_all(rows: Iterable[Row] | RowSource, naming: PropertyNaming) -> list[dict[str, JSON]]:
    if isinstance(rows, RowSource):
        shaped: list[dict[str, JSON]] = []
        try:
            while (row := rows.fetch_next()) is not None:
                shaped.append(shape_row(row, naming, row_index=len(shaped)))
        finally:
            rows.close()
        return shaped
    return [shape_row(row, naming, row_index=i) for i, row in enumerate(rows)]


def envelope(objects: list[dict[str, JSON]], spec: OutputSpec) -> list[SelfDescribingDocument]:
    """Wrap already-accepted row objects according to the describe mode."""
    if spec.describe_mode == DescribeMode.EVERY_ROW:
        return [spec.describe(obj) for obj in objects]
    if spec.expected_rows.is_single:
        return [spec.describe(objects[0])] if objects else []
    return [spec.describe(list(objects))]


def convert(rows: Iterable[Row] | RowSource, spec: OutputSpec) -> ConversionResult:
    """Convert query rows into self-describing contexts.

    Args:
        rows: Rows in source order, or a RowSource to drain (closed afterwards,
            also on failure)
        spec: Output specification

    Returns:
        ConversionResult with the contexts, or an InvalidRowCount error

    Raises:
        RowReadError: If any row or column cannot be read or converted
    """
    objects = _shape_all(rows, spec.property_naming)

    if not spec.expected_rows.accepts(len(objects)):
        result = ConversionResult.invalid_row_count(spec.expected_rows, len(objects))
        logger.warning(
            "Unexpected row count",
            schema=spec.schema_uri,
            expected_rows=spec.expected_rows.value,
            count=len(objects),
        )
        return result

    contexts = envelope(objects, spec)
    logger.debug(
        "Rows converted",
        schema=spec.schema_uri,
        rows=len(objects),
        contexts=len(contexts),
    )
    return ConversionResult.success(contexts)
