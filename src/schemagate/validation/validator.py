"""Schema validation orchestrator.

Extracts the self-describing documents attached to an event (the contexts
envelope and the unstructured-event envelope), validates them against the
schema registry and classifies every outcome.

Per attachment slot:

    raw text --(json)--> JSON --(sdj)--> envelope --(criterion)--> --(registry)--> envelope.data

    1. absent/empty field        -> nothing to extract (not a failure)
    2. not JSON                  -> NotJson
    3. not self-describing       -> NotSelfDescribing
    4. outside expected family   -> CriterionMismatch
    5. registry rejects envelope -> RegistryError

Then the envelope data is validated: the contexts envelope holds an array
of documents, each validated independently (one bad context does not
discard the others); the unstructured-event envelope holds one document.
Inner documents go through steps 3-5 again, with the optional
context_data_criterion / unstruct_event_data_criterion as their criterion.

A document is reported with its FIRST defect only, in the order above.

Enrichment-produced contexts go through validate_batch() instead, which
is all-or-nothing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from schemagate.contracts.enums import SdjType
from schemagate.contracts.events import EventAttachments
from schemagate.contracts.registry import RegistryClientError, SchemaRegistryClient
from schemagate.contracts.results import (
    BatchValidationResult,
    EnrichmentContextFailure,
    EventExtractResult,
    Invalid,
    Valid,
    ValidationFailure,
    ValidationInfo,
    ValidationOutcome,
)
from schemagate.contracts.schema_key import SchemaCriterion, SchemaVer
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
from schemagate.core.config import ValidationSettings
from schemagate.core.json_utils import extract_json
from schemagate.core.logging import get_logger
from schemagate.validation.accumulate import accumulate_all_or_nothing, accumulate_partial
from schemagate.validation.dispatch import OrderedDispatcher

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Slot:
    """One attachment slot of an event."""

    sdj_type: SdjType
    field: str
    raw: str
    criterion: SchemaCriterion


@dataclass(frozen=True, slots=True)
class _Envelope:
    """Envelope that passed steps 2-5, with its data still to validate."""

    slot: _Slot
    data: JSON


class EventValidator:
    """Validates event attachments and enrichment contexts against a registry.

    The validator owns an optional thread pool (settings.max_workers > 1)
    for concurrent registry checks; use it as a context manager or call
    close() when done. It holds no per-event state and may be shared
    across events.

    Example:
        with EventValidator(client, ValidationSettings(max_workers=4)) as validator:
            result = validator.extract_and_validate(event)
            if result.has_failures:
                ...
    """

    def __init__(self, client: SchemaRegistryClient, settings: ValidationSettings | None = None) -> None:
        self._client = client
        self._settings = settings if settings is not None else ValidationSettings()
        self._dispatcher = OrderedDispatcher(max_workers=self._settings.max_workers)

    @property
    def settings(self) -> ValidationSettings:
        return self._settings

    def close(self) -> None:
        self._dispatcher.close()

    def __enter__(self) -> EventValidator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Event attachments
    # ------------------------------------------------------------------

    def extract_and_validate(self, event: EventAttachments) -> EventExtractResult:
        """Extract and validate the contexts and unstructured event of an event.

        Never raises for user data: absent attachments yield an empty result,
        invalid ones are reported in validation_failures.

        Args:
            event: Any object exposing raw `contexts` and `unstruct_event` text

        Returns:
            EventExtractResult with accepted documents, validation info for
            superseded schemas and failure records

        Raises:
            Exception: Only non-RegistryClientError exceptions from the
                registry client (bugs) propagate
        """
        slots = self._present_slots(event)

        # Phase 1: envelopes (steps 2-5), one registry check per slot
        envelopes = self._dispatcher.map(self._extract_envelope, slots)

        # Phase 2: documents inside the envelopes, one registry check each
        inner: list[tuple[SdjType, JSON]] = []
        envelope_failures: dict[SdjType, ValidationFailure] = {}
        for slot, extracted in zip(slots, envelopes, strict=True):
            if isinstance(extracted, ValidationFailure):
                envelope_failures[slot.sdj_type] = extracted
            elif slot.sdj_type == SdjType.CONTEXT:
                inner.extend((SdjType.CONTEXT, element) for element in extracted.data)
            else:
                inner.append((SdjType.UNSTRUCT_EVENT, extracted.data))

        outcomes = self._dispatcher.map(self._validate_attached, inner)

        context_outcomes: list[Valid | ValidationFailure] = []
        unstruct_outcomes: list[Valid | ValidationFailure] = []
        for (sdj_type, _), outcome in zip(inner, outcomes, strict=True):
            (context_outcomes if sdj_type == SdjType.CONTEXT else unstruct_outcomes).append(outcome)
        if SdjType.CONTEXT in envelope_failures:
            context_outcomes.append(envelope_failures[SdjType.CONTEXT])
        if SdjType.UNSTRUCT_EVENT in envelope_failures:
            unstruct_outcomes.append(envelope_failures[SdjType.UNSTRUCT_EVENT])

        contexts = accumulate_partial(context_outcomes, ValidationFailure)
        unstruct = accumulate_partial(unstruct_outcomes, ValidationFailure)

        failures = [*contexts.failures, *unstruct.failures]
        infos: list[ValidationInfo] = []
        for valid in [*contexts.successes, *unstruct.successes]:
            info = valid.validation_info
            if info is not None and info not in infos:
                infos.append(info)

        result = EventExtractResult(
            contexts=[valid.document for valid in contexts.successes],
            unstruct_event=unstruct.successes[0].document if unstruct.successes else None,
            validation_info=[info.to_document() for info in infos],
            validation_failures=[failure.to_document() for failure in failures],
            failure_details=failures,
        )
        logger.info(
            "Event attachments validated",
            contexts=len(result.contexts),
            unstruct_event=result.unstruct_event is not None,
            superseded=len(result.validation_info),
            failures=len(result.validation_failures),
        )
        return result

    def _present_slots(self, event: EventAttachments) -> list[_Slot]:
        slots: list[_Slot] = []
        if event.contexts:
            slots.append(
                _Slot(
                    sdj_type=SdjType.CONTEXT,
                    field=self._settings.contexts_field,
                    raw=event.contexts,
                    criterion=self._settings.contexts_criterion,
                )
            )
        if event.unstruct_event:
            slots.append(
                _Slot(
                    sdj_type=SdjType.UNSTRUCT_EVENT,
                    field=self._settings.unstruct_event_field,
                    raw=event.unstruct_event,
                    criterion=self._settings.unstruct_event_criterion,
                )
            )
        return slots

    def _extract_envelope(self, slot: _Slot) -> _Envelope | ValidationFailure:
        """Steps 2-5 for one slot; failures carry the whole raw field."""
        try:
            parsed = extract_json(slot.raw)
        except ValueError as e:
            return self._failure(NotJson(field=slot.field, raw=slot.raw, error=str(e)), slot.sdj_type, slot.raw)

        try:
            envelope = SelfDescribingDocument.parse(parsed)
        except SelfDescribingParseError as e:
            return self._failure(NotSelfDescribing(json=parsed, error=e.code), slot.sdj_type, slot.raw)

        if not slot.criterion.matches(envelope.schema):
            return self._failure(CriterionMismatch(schema=envelope.schema, criterion=slot.criterion), slot.sdj_type, slot.raw)

        try:
            self._client.check(envelope)
        except RegistryClientError as e:
            return self._failure(RegistryError(schema=envelope.schema, error=e), slot.sdj_type, slot.raw)

        if slot.sdj_type == SdjType.CONTEXT and not isinstance(envelope.data, list):
            # Registry accepted an envelope whose data is not an array
            return self._failure(
                NotSelfDescribing(json=parsed, error=SelfDescribingParseErrorCode.INVALID_DATA),
                slot.sdj_type,
                slot.raw,
            )

        return _Envelope(slot=slot, data=envelope.data)

    def _validate_attached(self, item: tuple[SdjType, JSON]) -> Valid | ValidationFailure:
        sdj_type, value = item
        if sdj_type == SdjType.CONTEXT:
            criterion = self._settings.context_data_criterion
        else:
            criterion = self._settings.unstruct_event_data_criterion
        outcome = self.validate_document(value, criterion)
        if isinstance(outcome, Invalid):
            return self._failure(outcome.violation, sdj_type, _raw_text(value))
        return outcome

    def _failure(self, violation: SchemaViolation, sdj_type: SdjType, raw: str) -> ValidationFailure:
        schema = getattr(violation, "schema", None)
        logger.warning(
            "Attached document rejected",
            sdj_type=sdj_type.value,
            violation=violation.kind.value,
            schema=schema.to_schema_uri() if schema is not None else None,
        )
        return ValidationFailure(violation=violation, sdj_type=sdj_type, json=raw)

    # ------------------------------------------------------------------
    # Single documents
    # ------------------------------------------------------------------

    def validate_document(self, value: JSON, criterion: SchemaCriterion | None = None) -> ValidationOutcome:
        """Parse a JSON value as a self-describing document and validate it.

        When the registry reports a superseding schema version, the accepted
        document's schema is rewritten to that version; the declared schema
        is kept on the Valid outcome (and in its validation_info).

        Args:
            value: Parsed JSON value
            criterion: Schema family the document must belong to, if any

        Returns:
            Valid or Invalid (NotSelfDescribing, CriterionMismatch or RegistryError)
        """
        try:
            document = SelfDescribingDocument.parse(value)
        except SelfDescribingParseError as e:
            return Invalid(NotSelfDescribing(json=value, error=e.code))

        if criterion is not None and not criterion.matches(document.schema):
            return Invalid(CriterionMismatch(schema=document.schema, criterion=criterion))

        try:
            superseded_by = self._client.check(document)
        except RegistryClientError as e:
            return Invalid(RegistryError(schema=document.schema, error=e))

        if superseded_by is None or superseded_by == document.schema.version:
            return Valid(document=document, declared_schema=document.schema)

        logger.debug(
            "Schema superseded",
            declared=document.schema.to_schema_uri(),
            validated_with=superseded_by.as_string(),
        )
        return Valid(
            document=document.with_version(superseded_by),
            declared_schema=document.schema,
            superseded_by=superseded_by,
        )

    # ------------------------------------------------------------------
    # Enrichment contexts
    # ------------------------------------------------------------------

    def validate_batch(self, documents: Sequence[SelfDescribingDocument]) -> BatchValidationResult:
        """Validate contexts produced by enrichments, all-or-nothing.

        These documents are generated inside the pipeline, so any invalid
        one rejects the whole event. Every document is still checked so the
        result lists all failures, in input order.

        Args:
            documents: Enrichment-produced contexts

        Returns:
            BatchValidationResult.valid(), or invalid() with one
            EnrichmentContextFailure per invalid document
        """
        checked = self._dispatcher.map(self._check_enrichment_context, documents)
        collected = accumulate_all_or_nothing(checked, EnrichmentContextFailure)
        if collected.ok:
            return BatchValidationResult.valid()

        for failure in collected.rejected:
            logger.warning(
                "Enrichment context rejected",
                schema=failure.schema.to_schema_uri(),
                error=failure.error.error_type,
            )
        return BatchValidationResult.invalid(collected.rejected)

    def _check_enrichment_context(self, document: SelfDescribingDocument) -> SchemaVer | None | EnrichmentContextFailure:
        try:
            return self._client.check(document)
        except RegistryClientError as e:
            return EnrichmentContextFailure(schema=document.schema, error=e)


def _raw_text(value: JSON) -> str:
    # Elements were parsed from JSON text, so they always serialize back
    return compact_json(value)


def extract_and_validate(
    event: EventAttachments,
    client: SchemaRegistryClient,
    settings: ValidationSettings | None = None,
) -> EventExtractResult:
    """One-shot extract_and_validate() with a short-lived EventValidator."""
    with EventValidator(client, settings) as validator:
        return validator.extract_and_validate(event)


def validate_batch(
    documents: Sequence[SelfDescribingDocument],
    client: SchemaRegistryClient,
    settings: ValidationSettings | None = None,
) -> BatchValidationResult:
    """One-shot validate_batch() with a short-lived EventValidator."""
    with EventValidator(client, settings) as validator:
        return validator.validate_batch(documents)
