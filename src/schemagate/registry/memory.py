"""In-memory schema registry client backed by jsonschema.

A SchemaRegistryClient for tests, local development and embedding. No
network I/O: schemas are registered programmatically or loaded from a
static registry directory laid out as

    <root>/schemas/<vendor>/<name>/<format>/<model>-<revision>-<addition>

Superseding: a schema may declare ``"$supersededBy": "M-R-A"``. Data
declared against it is then validated against the superseding version, and
check() returns that version so the caller can rewrite the document.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from threading import Lock
from typing import Any

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from schemagate.contracts.registry import (
    DataValidationError,
    InvalidSchemaError,
    SchemaResolutionError,
    ValidatorReport,
)
from schemagate.contracts.schema_key import SchemaKey, SchemaKeyParseError, SchemaVer
from schemagate.contracts.self_describing import SelfDescribingDocument
from schemagate.core.logging import get_logger

logger = get_logger(__name__)

SUPERSEDED_BY_KEYWORD = "$supersededBy"


class InMemorySchemaRegistry:
    """Schema registry holding JSON Schemas in memory.

    Schemas without "$schema" are validated as draft-04, the draft
    self-describing schemas are written in.

    Thread Safety:
        register() and check() may be called concurrently; compiled
        validators are cached under a lock.
    """

    def __init__(self, schemas: Mapping[str, dict[str, Any]] | None = None) -> None:
        self._schemas: dict[SchemaKey, dict[str, Any]] = {}
        self._validators: dict[SchemaKey, Validator] = {}
        self._lock = Lock()
        for uri, schema in (schemas or {}).items():
            self.register(uri, schema)

    @classmethod
    def from_directory(cls, root: Path) -> InMemorySchemaRegistry:
        """Load every schema file under <root>/schemas.

        Raises:
            FileNotFoundError: If <root>/schemas does not exist
            ValueError: If a file path is not a valid schema location
        """
        schemas_dir = root / "schemas"
        if not schemas_dir.is_dir():
            raise FileNotFoundError(f"Schema directory not found: {schemas_dir}")

        registry = cls()
        for path in sorted(p for p in schemas_dir.rglob("*") if p.is_file()):
            parts = path.relative_to(schemas_dir).parts
            if len(parts) != 4:
                raise ValueError(f"Unexpected schema location {path}: expected vendor/name/format/version")
            uri = "iglu:" + "/".join(parts)
            registry.register(uri, json.loads(path.read_text(encoding="utf-8")))
        logger.debug("Schema registry loaded", root=str(root), schemas=len(registry))
        return registry

    def __len__(self) -> int:
        return len(self._schemas)

    def __contains__(self, key: object) -> bool:
        return key in self._schemas

    def register(self, schema: str | SchemaKey, definition: dict[str, Any]) -> None:
        """Add or replace a schema.

        Raises:
            SchemaKeyParseError: If schema is a malformed URI
            ValueError: If the $supersededBy value is not a full version
        """
        key = schema if isinstance(schema, SchemaKey) else SchemaKey.parse(schema)
        if SUPERSEDED_BY_KEYWORD in definition:
            try:
                SchemaVer.parse(definition[SUPERSEDED_BY_KEYWORD])
            except (SchemaKeyParseError, TypeError) as e:
                raise ValueError(f"Invalid {SUPERSEDED_BY_KEYWORD} in {key}: {definition[SUPERSEDED_BY_KEYWORD]!r}") from e
        with self._lock:
            self._schemas[key] = definition
            self._validators.pop(key, None)

    def check(self, document: SelfDescribingDocument) -> SchemaVer | None:
        """Validate document data against its schema (or the superseding one).

        Returns:
            Superseding version, or None when the declared schema is current

        Raises:
            SchemaResolutionError: Declared or superseding schema not registered
            InvalidSchemaError: The schema is not a valid JSON Schema
            DataValidationError: The data does not conform
        """
        declared = document.schema
        definition = self._lookup(declared)

        superseded_by: SchemaVer | None = None
        target = declared
        if SUPERSEDED_BY_KEYWORD in definition:
            superseded_by = SchemaVer.parse(definition[SUPERSEDED_BY_KEYWORD])
            target = declared.with_version(superseded_by)
            self._lookup(target)

        validator = self._validator(target)
        reports = tuple(
            ValidatorReport(message=error.message, path=error.json_path, keyword=str(error.validator))
            for error in sorted(validator.iter_errors(document.data), key=lambda e: list(e.absolute_path))
        )
        if reports:
            raise DataValidationError(target, reports)
        return superseded_by

    def _lookup(self, key: SchemaKey) -> dict[str, Any]:
        try:
            return self._schemas[key]
        except KeyError:
            raise SchemaResolutionError(key, "not found in registry") from None

    def _validator(self, key: SchemaKey) -> Validator:
        with self._lock:
            cached = self._validators.get(key)
            if cached is not None:
                return cached
            definition = self._schemas[key]
            schema = {k: v for k, v in definition.items() if k != SUPERSEDED_BY_KEYWORD}
            validator_cls = validator_for(schema, default=Draft4Validator)
            try:
                validator_cls.check_schema(schema)
            except SchemaError as e:
                raise InvalidSchemaError(key, e.message) from e
            validator = validator_cls(schema)
            self._validators[key] = validator
            return validator
