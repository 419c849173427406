"""Schema validation orchestration for event attachments and enrichment contexts."""

from schemagate.validation.accumulate import (
    AllOrNothing,
    Partitioned,
    accumulate_all_or_nothing,
    accumulate_partial,
)
from schemagate.validation.dispatch import OrderedDispatcher
from schemagate.validation.validator import EventValidator, extract_and_validate, validate_batch

__all__ = [
    "AllOrNothing",
    "EventValidator",
    "OrderedDispatcher",
    "Partitioned",
    "accumulate_all_or_nothing",
    "accumulate_partial",
    "extract_and_validate",
    "validate_batch",
]
