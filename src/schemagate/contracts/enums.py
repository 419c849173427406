"""Modes, kinds and tags used across subsystem boundaries.

Configuration enums (DescribeMode, ExpectedRows, PropertyNaming) use the
exact strings found in enrichment configuration files as their values, so
an unknown value is caught when the configuration is loaded and never while
an event is processed.
"""

from enum import StrEnum

from schemagate.contracts.errors import ConfigurationError


class DescribeMode(StrEnum):
    """How many self-describing contexts a set of output rows collapses into.

    Values:
        ALL_ROWS: One context wraps every returned row (object or array)
        EVERY_ROW: One context per returned row, all with the same schema
    """

    ALL_ROWS = "ALL_ROWS"
    EVERY_ROW = "EVERY_ROW"


class ExpectedRows(StrEnum):
    """Acceptance rule for how many rows a query may legitimately return."""

    EXACTLY_ONE = "EXACTLY_ONE"
    AT_MOST_ONE = "AT_MOST_ONE"
    AT_LEAST_ONE = "AT_LEAST_ONE"
    AT_LEAST_ZERO = "AT_LEAST_ZERO"

    @property
    def is_single(self) -> bool:
        """True for the one-or-zero policies (a lone object, never an array)."""
        return self in (ExpectedRows.EXACTLY_ONE, ExpectedRows.AT_MOST_ONE)

    def accepts(self, count: int) -> bool:
        """Check a row count against this policy."""
        if self == ExpectedRows.EXACTLY_ONE:
            return count == 1
        if self == ExpectedRows.AT_MOST_ONE:
            return count <= 1
        if self == ExpectedRows.AT_LEAST_ONE:
            return count >= 1
        return True


class PropertyNaming(StrEnum):
    """How column labels are rewritten into JSON property names."""

    AS_IS = "AS_IS"  # Some_Column -> Some_Column
    CAMEL_CASE = "CAMEL_CASE"  # some_column -> someColumn
    PASCAL_CASE = "PASCAL_CASE"  # some_column -> SomeColumn
    SNAKE_CASE = "SNAKE_CASE"  # SomeColumn -> _some_column
    LOWER_CASE = "LOWER_CASE"  # SomeColumn -> somecolumn
    UPPER_CASE = "UPPER_CASE"  # SomeColumn -> SOMECOLUMN


class ColumnKind(StrEnum):
    """Native value category of a column, as exposed by a row source.

    OPAQUE covers everything without a direct JSON mapping (decimals,
    driver-specific JSON types, arrays). Opaque values are parsed as
    JSON text, falling back to a JSON string.
    """

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"
    TEMPORAL = "temporal"
    OPAQUE = "opaque"


class SdjType(StrEnum):
    """Which event slot a self-describing document was extracted from."""

    UNSTRUCT_EVENT = "UnstructEvent"
    CONTEXT = "Context"


class ViolationKind(StrEnum):
    """Discriminator for SchemaViolation variants.

    Declaration order is also defect precedence: a document is only ever
    reported with the first defect found.
    """

    NOT_JSON = "not_json"
    NOT_SELF_DESCRIBING = "not_self_describing"
    CRITERION_MISMATCH = "criterion_mismatch"
    REGISTRY_ERROR = "registry_error"


def _parse_mode[E: StrEnum](enum_type: type[E], value: str, what: str) -> E:
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_type)
        raise ConfigurationError(f"[{value}] is unknown value for {what}. Expected one of: {allowed}.") from None


def parse_describe_mode(value: str) -> DescribeMode:
    """Parse the `describes` configuration value.

    Raises:
        ConfigurationError: If value is not a known describe mode
    """
    return _parse_mode(DescribeMode, value, "describes property")


def parse_expected_rows(value: str) -> ExpectedRows:
    """Parse the `expectedRows` configuration value.

    Raises:
        ConfigurationError: If value is not a known row-count policy
    """
    return _parse_mode(ExpectedRows, value, "expectedRows property")


def parse_property_naming(value: str) -> PropertyNaming:
    """Parse the `propertyNames` configuration value.

    Raises:
        ConfigurationError: If value is not a known casing mode
    """
    return _parse_mode(PropertyNaming, value, "propertyNames property")
