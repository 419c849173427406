"""Shared contracts for cross-boundary data types.

All dataclasses, enums and protocols that cross subsystem boundaries
(validation <-> sqlquery <-> callers) are defined here.

This package is a LEAF MODULE with no outbound dependencies to core,
validation or sqlquery. Settings classes are NOT re-exported here - import
them from schemagate.core.config.

Import patterns:
    from schemagate.contracts import SchemaKey, SelfDescribingDocument, Valid
    from schemagate.core.config import ValidationSettings
"""

from schemagate.contracts.enums import (
    ColumnKind,
    DescribeMode,
    ExpectedRows,
    PropertyNaming,
    SdjType,
    ViolationKind,
    parse_describe_mode,
    parse_expected_rows,
    parse_property_naming,
)
from schemagate.contracts.errors import ConfigurationError, RowReadError
from schemagate.contracts.events import EventAttachments, RawEventFields
from schemagate.contracts.registry import (
    DataValidationError,
    InvalidSchemaError,
    RegistryClientError,
    SchemaRegistryClient,
    SchemaResolutionError,
    ValidatorReport,
)
from schemagate.contracts.results import (
    BatchValidationResult,
    ConversionResult,
    EnrichmentContextFailure,
    EventExtractResult,
    Invalid,
    InvalidRowCount,
    Valid,
    ValidationFailure,
    ValidationInfo,
    ValidationOutcome,
)
from schemagate.contracts.rows import Column, Row, RowSource
from schemagate.contracts.schema_key import (
    SchemaCriterion,
    SchemaKey,
    SchemaKeyParseError,
    SchemaKeyParseErrorCode,
    SchemaVer,
)
from schemagate.contracts.self_describing import (
    JSON,
    SelfDescribingDocument,
    SelfDescribingParseError,
    SelfDescribingParseErrorCode,
    compact_json,
)
from schemagate.contracts.violations import (
    CriterionMismatch,
    NotJson,
    NotSelfDescribing,
    RegistryError,
    SchemaViolation,
)

__all__ = [
    # enums
    "ColumnKind",
    "DescribeMode",
    "ExpectedRows",
    "PropertyNaming",
    "SdjType",
    "ViolationKind",
    "parse_describe_mode",
    "parse_expected_rows",
    "parse_property_naming",
    # errors
    "ConfigurationError",
    "RowReadError",
    # events
    "EventAttachments",
    "RawEventFields",
    # registry
    "DataValidationError",
    "InvalidSchemaError",
    "RegistryClientError",
    "SchemaRegistryClient",
    "SchemaResolutionError",
    "ValidatorReport",
    # results
    "BatchValidationResult",
    "ConversionResult",
    "EnrichmentContextFailure",
    "EventExtractResult",
    "Invalid",
    "InvalidRowCount",
    "Valid",
    "ValidationFailure",
    "ValidationInfo",
    "ValidationOutcome",
    # rows
    "Column",
    "Row",
    "RowSource",
    # schema keys
    "SchemaCriterion",
    "SchemaKey",
    "SchemaKeyParseError",
    "SchemaKeyParseErrorCode",
    "SchemaVer",
    # self-describing
    "JSON",
    "SelfDescribingDocument",
    "SelfDescribingParseError",
    "SelfDescribingParseErrorCode",
    "compact_json",
    # violations
    "CriterionMismatch",
    "NotJson",
    "NotSelfDescribing",
    "RegistryError",
    "SchemaViolation",
]
