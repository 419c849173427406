"""Event attachment fields read by the orchestrator.

The surrounding event model is not owned here. The orchestrator only reads
two raw JSON text fields, so any object exposing them satisfies the
EventAttachments protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class EventAttachments(Protocol):
    """Raw attachment slots of an event.

    Attributes:
        contexts: JSON text of the contexts envelope, or None
        unstruct_event: JSON text of the unstructured-event envelope, or None
    """

    @property
    def contexts(self) -> str | None: ...

    @property
    def unstruct_event(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class RawEventFields:
    """Minimal EventAttachments implementation."""

    contexts: str | None = None
    unstruct_event: str | None = None
