"""Self-describing JSON documents.

A self-describing document pairs a JSON payload with the schema it claims
to conform to:

    {"schema": "iglu:com.acme/checkout/jsonschema/1-0-0", "data": {...}}

Documents are immutable. Rewriting the schema version (after the registry
reports a superseding schema) produces a new document.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from schemagate.contracts.schema_key import SchemaKey, SchemaKeyParseError, SchemaVer

# Any JSON value as produced by json.loads()
type JSON = Any


class SelfDescribingParseErrorCode(StrEnum):
    """Why a JSON value is not a self-describing document."""

    INVALID_DATA = "INVALID_DATA"
    INVALID_SCHEMA = "INVALID_SCHEMA"
    INVALID_IGLU_URI = "INVALID_IGLU_URI"
    INVALID_SCHEMAVER = "INVALID_SCHEMAVER"


class SelfDescribingParseError(ValueError):
    """Raised when a JSON value cannot be read as a self-describing document.

    Attributes:
        code: Machine-readable reason
    """

    def __init__(self, code: SelfDescribingParseErrorCode, detail: str) -> None:
        self.code = code
        super().__init__(f"{code.value}: {detail}")


@dataclass(frozen=True, slots=True)
class SelfDescribingDocument:
    """A JSON payload tagged with its schema."""

    schema: SchemaKey
    data: JSON

    @classmethod
    def parse(cls, value: JSON) -> SelfDescribingDocument:
        """Read a parsed JSON value as a self-describing document.

        The value must be an object with a string ``schema`` holding a valid
        schema URI and a ``data`` member (which may be any JSON, including null).

        Raises:
            SelfDescribingParseError: If the value is not self-describing
        """
        if not isinstance(value, dict):
            raise SelfDescribingParseError(
                SelfDescribingParseErrorCode.INVALID_SCHEMA,
                f"expected a JSON object, got {_json_type_name(value)}",
            )
        if "schema" not in value or not isinstance(value["schema"], str):
            raise SelfDescribingParseError(SelfDescribingParseErrorCode.INVALID_SCHEMA, "'schema' must be a string")
        if "data" not in value:
            raise SelfDescribingParseError(SelfDescribingParseErrorCode.INVALID_DATA, "'data' is missing")

        try:
            schema = SchemaKey.parse(value["schema"])
        except SchemaKeyParseError as e:
            raise SelfDescribingParseError(SelfDescribingParseErrorCode(e.code.value), str(e)) from e

        return cls(schema=schema, data=value["data"])

    @classmethod
    def of(cls, schema_uri: str, data: JSON) -> SelfDescribingDocument:
        """Build a document from a schema URI string.

        Raises:
            SchemaKeyParseError: If schema_uri is malformed
        """
        return cls(schema=SchemaKey.parse(schema_uri), data=data)

    def with_version(self, version: SchemaVer) -> SelfDescribingDocument:
        return replace(self, schema=self.schema.with_version(version))

    def to_json(self) -> dict[str, JSON]:
        return {"schema": self.schema.to_schema_uri(), "data": self.data}

    def to_json_string(self) -> str:
        """Compact JSON text (no whitespace between tokens)."""
        return compact_json(self.to_json())


def compact_json(value: JSON) -> str:
    """Serialize JSON without insignificant whitespace."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def _json_type_name(value: JSON) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
