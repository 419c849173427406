# tests/validation/test_batch.py
"""Tests for all-or-nothing validation of enrichment-produced contexts."""

from schemagate.contracts.registry import DataValidationError, SchemaResolutionError, ValidatorReport
from schemagate.contracts.schema_key import SchemaKey, SchemaVer
from schemagate.contracts.self_describing import SelfDescribingDocument
from tests.helpers import ScriptedRegistryClient

GEO = "iglu:com.acme/geo/jsonschema/1-0-0"
WEATHER = "iglu:com.acme/weather/jsonschema/1-0-0"
USER = "iglu:com.acme/user/jsonschema/1-0-0"


def _documents() -> list[SelfDescribingDocument]:
    return [
        SelfDescribingDocument.of(GEO, {"lat": 1.0}),
        SelfDescribingDocument.of(WEATHER, {"temp": "hot"}),
        SelfDescribingDocument.of(USER, {"id": 1}),
    ]


class TestValidateBatch:
    def test_all_valid(self, registry: ScriptedRegistryClient) -> None:
        from schemagate.validation import validate_batch

        result = validate_batch(_documents(), registry)

        assert result.is_valid
        assert result.failures == ()

    def test_empty_batch_is_valid(self, registry: ScriptedRegistryClient) -> None:
        from schemagate.validation import validate_batch

        assert validate_batch([], registry).is_valid

    def test_one_invalid_rejects_batch(self) -> None:
        from schemagate.validation import validate_batch

        error = DataValidationError(SchemaKey.parse(WEATHER), (ValidatorReport("'hot' is not of type 'number'", path="$.temp"),))
        registry = ScriptedRegistryClient({WEATHER: error})

        result = validate_batch(_documents(), registry)

        assert not result.is_valid
        assert len(result.failures) == 1
        assert result.failures[0].schema.to_schema_uri() == WEATHER
        assert result.failures[0].error is error
        # Every document is still checked
        assert registry.calls == [GEO, WEATHER, USER]

    def test_all_failures_listed_in_order(self) -> None:
        from schemagate.validation import validate_batch

        registry = ScriptedRegistryClient(
            {
                GEO: SchemaResolutionError(SchemaKey.parse(GEO), "not found"),
                USER: SchemaResolutionError(SchemaKey.parse(USER), "not found"),
            }
        )

        result = validate_batch(_documents(), registry)

        assert [f.schema.to_schema_uri() for f in result.failures] == [GEO, USER]

    def test_superseding_is_not_a_failure(self) -> None:
        from schemagate.validation import validate_batch

        registry = ScriptedRegistryClient({GEO: SchemaVer(1, 0, 1)})

        assert validate_batch(_documents(), registry).is_valid

    def test_concurrent_batch(self) -> None:
        from schemagate.core.config import ValidationSettings
        from schemagate.validation import validate_batch

        registry = ScriptedRegistryClient(
            {GEO: SchemaResolutionError(SchemaKey.parse(GEO), "not found")},
            delays={GEO: 0.03},
        )

        result = validate_batch(_documents(), registry, ValidationSettings(max_workers=3))

        assert [f.schema.to_schema_uri() for f in result.failures] == [GEO]
