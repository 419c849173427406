"""Accumulation of per-item outcomes that may be successes or failures.

Two strategies, deliberately separate operations:

- accumulate_partial: keep every success AND every failure. Used for
  attached input contexts, where one bad element must not discard the
  good ones.
- accumulate_all_or_nothing: either every item succeeded, or the whole
  sequence is rejected with all of its failures. Used for contexts
  produced by enrichments, where any failure rejects the event.

Both preserve the input order within each list.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Partitioned[S, F]:
    """Successes and failures of a sequence, each in input order."""

    successes: list[S]
    failures: list[F]


@dataclass(frozen=True, slots=True)
class AllOrNothing[S, F]:
    """Either all successes (rejected is empty) or all failures (accepted is None)."""

    accepted: list[S] | None
    rejected: list[F]

    @property
    def ok(self) -> bool:
        return self.accepted is not None


def accumulate_partial[S, F](items: Iterable[S | F], failure_type: type[F]) -> Partitioned[S, F]:
    """Split items into successes and failures without aborting on failure.

    Args:
        items: Outcomes in input order
        failure_type: Type that marks an item as a failure

    Returns:
        Partitioned with both lists in input order
    """
    successes: list[S] = []
    failures: list[F] = []
    for item in items:
        if isinstance(item, failure_type):
            failures.append(item)
        else:
            successes.append(item)  # type: ignore[arg-type]
    return Partitioned(successes=successes, failures=failures)


def accumulate_all_or_nothing[S, F](items: Iterable[S | F], failure_type: type[F]) -> AllOrNothing[S, F]:
    """Accept the whole sequence only if no item failed.

    Every item is still inspected so the rejection lists ALL failures,
    not just the first.

    Args:
        items: Outcomes in input order
        failure_type: Type that marks an item as a failure

    Returns:
        AllOrNothing with accepted=None when any item failed
    """
    accepted: list[S] = []
    rejected: list[F] = []
    for item in items:
        if isinstance(item, failure_type):
            rejected.append(item)
        else:
            accepted.append(item)  # type: ignore[arg-type]
    if rejected:
        return AllOrNothing(accepted=None, rejected=rejected)
    return AllOrNothing(accepted=accepted, rejected=[])
