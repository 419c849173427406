"""Schema violations: why an attached document was rejected.

SchemaViolation is a closed union of four frozen dataclasses. Each carries
a ``kind`` discriminator so callers can dispatch with ``match`` or on the
kind value, and each serializes itself with ``to_json()`` for diagnostics.

Only the first defect of a document is ever reported, in this order:
NotJson, NotSelfDescribing, CriterionMismatch, RegistryError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from schemagate.contracts.enums import ViolationKind
from schemagate.contracts.registry import RegistryClientError
from schemagate.contracts.schema_key import SchemaCriterion, SchemaKey
from schemagate.contracts.self_describing import JSON, SelfDescribingParseErrorCode


@dataclass(frozen=True, slots=True)
class NotJson:
    """Raw field text is not valid JSON.

    Attributes:
        field: Name of the event field the text came from
        raw: The raw text (None if absent)
        error: Parser error message
    """

    kind: ClassVar[ViolationKind] = ViolationKind.NOT_JSON

    field: str
    raw: str | None
    error: str

    def to_json(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "field": self.field, "value": self.raw, "error": self.error}


@dataclass(frozen=True, slots=True)
class NotSelfDescribing:
    """Parsed JSON is not a self-describing document."""

    kind: ClassVar[ViolationKind] = ViolationKind.NOT_SELF_DESCRIBING

    json: JSON
    error: SelfDescribingParseErrorCode

    def to_json(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "json": self.json, "error": self.error.value}


@dataclass(frozen=True, slots=True)
class CriterionMismatch:
    """Document schema is outside the expected schema family."""

    kind: ClassVar[ViolationKind] = ViolationKind.CRITERION_MISMATCH

    schema: SchemaKey
    criterion: SchemaCriterion

    def to_json(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "schemaKey": self.schema.to_schema_uri(),
            "schemaCriterion": self.criterion.as_string(),
        }


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Registry client rejected the document (unresolvable schema or invalid data)."""

    kind: ClassVar[ViolationKind] = ViolationKind.REGISTRY_ERROR

    schema: SchemaKey
    error: RegistryClientError

    def to_json(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "schemaKey": self.schema.to_schema_uri(), "error": self.error.to_json()}


type SchemaViolation = NotJson | NotSelfDescribing | CriterionMismatch | RegistryError
