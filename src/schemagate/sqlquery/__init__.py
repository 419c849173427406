"""SQL query output conversion: rows in, self-describing contexts out."""

from schemagate.sqlquery.naming import transform_property_name
from schemagate.sqlquery.output import OutputSpec, convert, envelope, shape_row
from schemagate.sqlquery.sources import ListRowSource, SqlAlchemyRowSource, execute_query, row_from_mapping
from schemagate.sqlquery.values import classify_value, column_to_json

__all__ = [
    "ListRowSource",
    "OutputSpec",
    "SqlAlchemyRowSource",
    "classify_value",
    "column_to_json",
    "convert",
    "envelope",
    "execute_query",
    "row_from_mapping",
    "shape_row",
    "transform_property_name",
]
