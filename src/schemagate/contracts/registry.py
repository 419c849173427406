"""Schema registry client protocol and its error types.

The registry client is an external collaborator: it resolves schemas,
caches them and talks to the network. The core only needs one capability:

    check(document) -> SchemaVer | None

which validates ``document.data`` against ``document.schema`` and returns
a superseding schema version when the registry knows of a later compatible
revision (None when the declared version is current).

Failures are raised as RegistryClientError subclasses. The orchestrator
turns these into RegistryError violations. Any other exception escaping a
client is treated as a bug and propagates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from schemagate.contracts.schema_key import SchemaKey, SchemaVer
    from schemagate.contracts.self_describing import SelfDescribingDocument


@dataclass(frozen=True, slots=True)
class ValidatorReport:
    """One data-validation problem reported by a registry client.

    Attributes:
        message: Human-readable description
        path: JSONPath-like location of the offending value ("$" for root)
        keyword: JSON Schema keyword that failed (e.g. "required"), if known
    """

    message: str
    path: str | None = None
    keyword: str | None = None

    def to_json(self) -> dict[str, Any]:
        return {"message": self.message, "path": self.path, "keyword": self.keyword}


class RegistryClientError(Exception):
    """Base class for registry client failures.

    Attributes:
        schema: The schema the failing check was made against
    """

    error_type = "RegistryClientError"

    def __init__(self, schema: SchemaKey, message: str) -> None:
        self.schema = schema
        super().__init__(message)

    def to_json(self) -> dict[str, Any]:
        return {"error": self.error_type, "message": str(self)}


class SchemaResolutionError(RegistryClientError):
    """The schema could not be found or fetched from any registry."""

    error_type = "ResolutionError"

    def __init__(self, schema: SchemaKey, reason: str) -> None:
        self.reason = reason
        super().__init__(schema, f"Cannot resolve schema {schema.to_schema_uri()}: {reason}")


class InvalidSchemaError(RegistryClientError):
    """The schema was found but is not itself a valid schema."""

    error_type = "InvalidSchema"

    def __init__(self, schema: SchemaKey, reason: str) -> None:
        self.reason = reason
        super().__init__(schema, f"Schema {schema.to_schema_uri()} is invalid: {reason}")


class DataValidationError(RegistryClientError):
    """The data does not satisfy its schema.

    Attributes:
        errors: Every problem found, in the order the validator reported them
    """

    error_type = "ValidationError"

    def __init__(self, schema: SchemaKey, errors: tuple[ValidatorReport, ...]) -> None:
        if not errors:
            raise ValueError("DataValidationError requires at least one ValidatorReport")
        self.errors = errors
        super().__init__(schema, f"Data does not conform to {schema.to_schema_uri()}: {errors[0].message}")

    def to_json(self) -> dict[str, Any]:
        return {
            "error": self.error_type,
            "message": str(self),
            "dataReports": [e.to_json() for e in self.errors],
        }


@runtime_checkable
class SchemaRegistryClient(Protocol):
    """Capability the orchestrator needs from a registry client.

    Implementations must be safe to call from several threads at once when
    the orchestrator is configured with more than one worker.
    """

    def check(self, document: SelfDescribingDocument) -> SchemaVer | None:
        """Validate a document against its declared schema.

        Returns:
            Superseding schema version, or None if the declared one is current

        Raises:
            RegistryClientError: On resolution failure or invalid data
        """
        ...
