"""Operation outcomes and results.

These types answer: "What did a validation or conversion produce?"

IMPORTANT:
- Outcomes are returned, never raised. User-data problems are data.
- BatchValidationResult.status and ConversionResult.status use Literal
  strings, NOT enums, so they compare directly to "valid"/"success".
- ValidationInfo and ValidationFailure render themselves as
  self-describing documents so they can travel as diagnostic contexts.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Literal

from schemagate.contracts.enums import ExpectedRows, SdjType
from schemagate.contracts.registry import DataValidationError, RegistryClientError
from schemagate.contracts.schema_key import SchemaKey, SchemaVer
from schemagate.contracts.self_describing import SelfDescribingDocument
from schemagate.contracts.violations import RegistryError, SchemaViolation

VALIDATION_INFO_SCHEMA = SchemaKey("com.snowplowanalytics.iglu", "validation_info", "jsonschema", SchemaVer(1, 0, 0))
VALIDATION_FAILURE_SCHEMA = SchemaKey("com.snowplowanalytics", "failure", "jsonschema", SchemaVer(2, 0, 0))

# Identifies enrichment-context batch validation in failure records
ENRICHMENT_CONTEXTS_VALIDATION = "enrichments-contexts-validation"


@dataclass(frozen=True, slots=True)
class ValidationInfo:
    """Record that a document was validated against a newer schema than declared.

    Attributes:
        original_schema: Schema the producer declared
        validated_with: Superseding version actually used
    """

    original_schema: SchemaKey
    validated_with: SchemaVer

    def to_document(self) -> SelfDescribingDocument:
        return SelfDescribingDocument(
            schema=VALIDATION_INFO_SCHEMA,
            data={
                "originalSchema": self.original_schema.to_schema_uri(),
                "validatedWith": self.validated_with.as_string(),
            },
        )


@dataclass(frozen=True, slots=True)
class Valid:
    """A document that passed validation.

    Attributes:
        document: Accepted document; its schema already carries the
            superseding version when there is one
        declared_schema: Schema as declared by the producer
        superseded_by: Superseding version reported by the registry, if any
    """

    document: SelfDescribingDocument
    declared_schema: SchemaKey
    superseded_by: SchemaVer | None = None

    @property
    def validation_info(self) -> ValidationInfo | None:
        if self.superseded_by is None:
            return None
        return ValidationInfo(original_schema=self.declared_schema, validated_with=self.superseded_by)


@dataclass(frozen=True, slots=True)
class Invalid:
    """A document that failed validation."""

    violation: SchemaViolation


type ValidationOutcome = Valid | Invalid


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """A violation tied to the event slot and raw JSON it came from.

    Attributes:
        violation: First defect found
        sdj_type: Slot the document was extracted from
        json: Raw JSON text of the rejected document (the whole field for
            envelope-level failures, the compact element text otherwise)
    """

    violation: SchemaViolation
    sdj_type: SdjType
    json: str

    def to_document(self) -> SelfDescribingDocument:
        """Render as a failure context.

        Only registry data-validation errors carry per-error details; every
        failure carries the original text base64-encoded.
        """
        errors: list[dict[str, Any]] = []
        violation = self.violation
        if isinstance(violation, RegistryError) and isinstance(violation.error, DataValidationError):
            errors = [{"message": report.message, "path": report.path} for report in violation.error.errors]
        return SelfDescribingDocument(
            schema=VALIDATION_FAILURE_SCHEMA,
            data={
                "errors": errors,
                "originalDataB64": base64.b64encode(self.json.encode("utf-8")).decode("ascii"),
            },
        )

    def to_json(self) -> dict[str, Any]:
        return {"sdjType": self.sdj_type.value, "violation": self.violation.to_json()}


@dataclass(frozen=True, slots=True)
class EventExtractResult:
    """Everything extracted from one event's attachments.

    Attributes:
        contexts: Accepted input contexts, in source order
        unstruct_event: Accepted unstructured event, if any
        validation_info: ValidationInfo documents (deduplicated, first-seen order)
        validation_failures: ValidationFailure documents, contexts first then
            the unstructured event
        failure_details: The ValidationFailure records behind
            validation_failures, same order (typed access for callers
            building bad rows)
    """

    contexts: list[SelfDescribingDocument] = field(default_factory=list)
    unstruct_event: SelfDescribingDocument | None = None
    validation_info: list[SelfDescribingDocument] = field(default_factory=list)
    validation_failures: list[SelfDescribingDocument] = field(default_factory=list)
    failure_details: list[ValidationFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.validation_failures)


@dataclass(frozen=True, slots=True)
class EnrichmentContextFailure:
    """One invalid enrichment-produced context.

    Attributes:
        schema: Schema of the rejected context
        error: Registry client error raised for it
    """

    schema: SchemaKey
    error: RegistryClientError

    def to_json(self) -> dict[str, Any]:
        return {
            "enrichment": {
                "schemaKey": self.schema.to_schema_uri(),
                "identifier": ENRICHMENT_CONTEXTS_VALIDATION,
            },
            "message": {"schemaKey": self.schema.to_schema_uri(), "error": self.error.to_json()},
        }


@dataclass(frozen=True, slots=True)
class BatchValidationResult:
    """Result of validating enrichment-produced contexts as one batch.

    Use the factory methods to create instances.

    Invariants:
    - status="valid" has no failures
    - status="invalid" has at least one failure
    """

    status: Literal["valid", "invalid"]
    failures: tuple[EnrichmentContextFailure, ...] = ()

    def __post_init__(self) -> None:
        if self.status == "valid" and self.failures:
            raise ValueError("BatchValidationResult with status='valid' cannot carry failures")
        if self.status == "invalid" and not self.failures:
            raise ValueError("BatchValidationResult with status='invalid' MUST carry at least one failure")

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    @classmethod
    def valid(cls) -> BatchValidationResult:
        return cls(status="valid")

    @classmethod
    def invalid(cls, failures: list[EnrichmentContextFailure] | tuple[EnrichmentContextFailure, ...]) -> BatchValidationResult:
        return cls(status="invalid", failures=tuple(failures))


_ROW_COUNT_MESSAGES: dict[ExpectedRows, str] = {
    ExpectedRows.EXACTLY_ONE: "SQL Query Enrichment: exactly one row was expected",
    ExpectedRows.AT_MOST_ONE: "SQL Query Enrichment: at most one row was expected",
    ExpectedRows.AT_LEAST_ONE: "SQL Query Enrichment: at least one row was expected. {count} given instead",
}


@dataclass(frozen=True, slots=True)
class InvalidRowCount:
    """A query returned a number of rows its policy does not allow.

    Recoverable: the calling enrichment rejects the event, the pipeline
    keeps running.
    AT_LEAST_ZERO accepts every count and so never produces one.
    """

    expected_rows: ExpectedRows
    count: int

    def __post_init__(self) -> None:
        if self.expected_rows.accepts(self.count):
            raise ValueError(f"InvalidRowCount: {self.expected_rows.value} accepts {self.count} rows")

    @property
    def message(self) -> str:
        return _ROW_COUNT_MESSAGES[self.expected_rows].format(count=self.count)

    def to_json(self) -> dict[str, Any]:
        return {"expectedRows": self.expected_rows.value, "count": self.count, "message": self.message}


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Result of converting query rows into self-describing contexts.

    Use the factory methods to create instances.

    Invariants:
    - status="success" has error=None
    - status="error" has an InvalidRowCount and no contexts
    """

    status: Literal["success", "error"]
    contexts: list[SelfDescribingDocument] = field(default_factory=list)
    error: InvalidRowCount | None = None

    def __post_init__(self) -> None:
        if self.status == "success" and self.error is not None:
            raise ValueError("ConversionResult with status='success' cannot carry an error")
        if self.status == "error" and (self.error is None or self.contexts):
            raise ValueError("ConversionResult with status='error' MUST carry an error and no contexts")

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, contexts: list[SelfDescribingDocument]) -> ConversionResult:
        return cls(status="success", contexts=contexts)

    @classmethod
    def invalid_row_count(cls, expected_rows: ExpectedRows, count: int) -> ConversionResult:
        return cls(status="error", error=InvalidRowCount(expected_rows=expected_rows, count=count))
