"""Schema identifiers: versions, keys and criteria.

A schema is identified by a URI of the form

    iglu:<vendor>/<name>/<format>/<model>-<revision>-<addition>

e.g. ``iglu:com.acme/checkout/jsonschema/1-0-2``. A criterion is the same
shape with ``*`` allowed for revision and addition, and matches a family of
schema versions sharing a model.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import StrEnum

_URI_PATTERN = re.compile(
    r"^iglu:"
    r"(?P<vendor>[a-zA-Z0-9\-_.]+)/"
    r"(?P<name>[a-zA-Z0-9\-_]+)/"
    r"(?P<format>[a-zA-Z0-9\-_]+)/"
    r"(?P<version>[^/]+)$"
)
_VERSION_PATTERN = re.compile(r"^(?P<model>[1-9][0-9]*)-(?P<revision>0|[1-9][0-9]*)-(?P<addition>0|[1-9][0-9]*)$")
_CRITERION_VERSION_PATTERN = re.compile(r"^(?P<model>[1-9][0-9]*)-(?P<revision>0|[1-9][0-9]*|\*)-(?P<addition>0|[1-9][0-9]*|\*)$")


class SchemaKeyParseErrorCode(StrEnum):
    """Why a schema URI could not be parsed."""

    INVALID_IGLU_URI = "INVALID_IGLU_URI"
    INVALID_SCHEMAVER = "INVALID_SCHEMAVER"


class SchemaKeyParseError(ValueError):
    """Raised when a schema URI or version string is malformed.

    Attributes:
        code: Machine-readable reason
        value: The rejected input
    """

    def __init__(self, code: SchemaKeyParseErrorCode, value: str) -> None:
        self.code = code
        self.value = value
        super().__init__(f"{code.value}: {value!r}")


@dataclass(frozen=True, slots=True, order=True)
class SchemaVer:
    """Full schema version (MODEL-REVISION-ADDITION)."""

    model: int
    revision: int
    addition: int

    @classmethod
    def parse(cls, value: str) -> SchemaVer:
        """Parse ``M-R-A``.

        Raises:
            SchemaKeyParseError: If value is not a full schema version
        """
        match = _VERSION_PATTERN.match(value)
        if match is None:
            raise SchemaKeyParseError(SchemaKeyParseErrorCode.INVALID_SCHEMAVER, value)
        return cls(int(match["model"]), int(match["revision"]), int(match["addition"]))

    def as_string(self) -> str:
        return f"{self.model}-{self.revision}-{self.addition}"

    def __str__(self) -> str:
        return self.as_string()


@dataclass(frozen=True, slots=True)
class SchemaKey:
    """Exact identifier of one schema version."""

    vendor: str
    name: str
    format: str
    version: SchemaVer

    @classmethod
    def parse(cls, uri: str) -> SchemaKey:
        """Parse an ``iglu:`` schema URI.

        Raises:
            SchemaKeyParseError: INVALID_IGLU_URI if the URI shape is wrong,
                INVALID_SCHEMAVER if only the version part is malformed
        """
        match = _URI_PATTERN.match(uri)
        if match is None:
            raise SchemaKeyParseError(SchemaKeyParseErrorCode.INVALID_IGLU_URI, uri)
        return cls(
            vendor=match["vendor"],
            name=match["name"],
            format=match["format"],
            version=SchemaVer.parse(match["version"]),
        )

    def to_schema_uri(self) -> str:
        return f"iglu:{self.vendor}/{self.name}/{self.format}/{self.version.as_string()}"

    def with_version(self, version: SchemaVer) -> SchemaKey:
        """Return the same schema family at another version."""
        return replace(self, version=version)

    def __str__(self) -> str:
        return self.to_schema_uri()


@dataclass(frozen=True, slots=True)
class SchemaCriterion:
    """Partial pattern over schema keys.

    Vendor, name, format and model must always be equal. Revision and
    addition are only compared when present (None means "any").
    """

    vendor: str
    name: str
    format: str
    model: int
    revision: int | None = None
    addition: int | None = None

    @classmethod
    def parse(cls, value: str) -> SchemaCriterion:
        """Parse ``iglu:vendor/name/format/M-R-A`` where R and A may be ``*``.

        Raises:
            SchemaKeyParseError: If the criterion is malformed
        """
        match = _URI_PATTERN.match(value)
        if match is None:
            raise SchemaKeyParseError(SchemaKeyParseErrorCode.INVALID_IGLU_URI, value)
        version = _CRITERION_VERSION_PATTERN.match(match["version"])
        if version is None:
            raise SchemaKeyParseError(SchemaKeyParseErrorCode.INVALID_SCHEMAVER, value)
        revision = version["revision"]
        addition = version["addition"]
        if revision == "*" and addition != "*":
            # 1-*-2: addition cannot be pinned when revision is open
            raise SchemaKeyParseError(SchemaKeyParseErrorCode.INVALID_SCHEMAVER, value)
        return cls(
            vendor=match["vendor"],
            name=match["name"],
            format=match["format"],
            model=int(version["model"]),
            revision=None if revision == "*" else int(revision),
            addition=None if addition == "*" else int(addition),
        )

    def matches(self, key: SchemaKey) -> bool:
        """Check whether a schema key belongs to this family."""
        if (key.vendor, key.name, key.format) != (self.vendor, self.name, self.format):
            return False
        if key.version.model != self.model:
            return False
        if self.revision is not None and key.version.revision != self.revision:
            return False
        return self.addition is None or key.version.addition == self.addition

    def as_string(self) -> str:
        revision = "*" if self.revision is None else str(self.revision)
        addition = "*" if self.addition is None else str(self.addition)
        return f"iglu:{self.vendor}/{self.name}/{self.format}/{self.model}-{revision}-{addition}"

    def __str__(self) -> str:
        return self.as_string()
