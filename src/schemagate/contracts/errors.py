"""Exceptions raised across subsystem boundaries.

User-data problems (schema violations, unexpected row counts) are NOT
exceptions - they are returned as structured results. The exceptions here
cover the two cases that must stop processing:

- Configuration errors: raised at load time, never per event.
- Collaborator failures that cannot be reported per event (row source I/O).

Registry client errors live in schemagate.contracts.registry because they
are part of the client protocol.
"""


class ConfigurationError(Exception):
    """Raised when configuration is invalid.

    Unknown enum values, malformed schema URIs and criteria, and settings
    that fail validation all surface as this error at load time.
    """

    pass


class RowReadError(Exception):
    """Raised when a row or column cannot be read from a row source.

    Fatal for the whole query: a partially read row set cannot be enveloped.
    The original driver exception is always chained as __cause__.

    Attributes:
        row_index: Zero-based index of the row being read, if known
        column: Label of the column being read, if known
    """

    def __init__(self, message: str, *, row_index: int | None = None, column: str | None = None) -> None:
        self.row_index = row_index
        self.column = column
        super().__init__(message)
