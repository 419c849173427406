"""Ordered dispatch of registry checks.

Registry checks for independent documents share no state, so they may run
concurrently. Results always come back in submission order regardless of
completion order.

With max_workers=1 no thread pool is created and checks run inline on the
caller's thread.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor


class OrderedDispatcher:
    """Map a function over items, possibly concurrently, preserving order.

    Callers must not submit work from inside a dispatched function: nested
    submissions on a bounded pool can deadlock.

    Usage:
        with OrderedDispatcher(max_workers=4) as dispatcher:
            results = dispatcher.map(check, documents)
    """

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._max_workers = max_workers
        self._pool: ThreadPoolExecutor | None = None
        if max_workers > 1:
            self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="schemagate-check")

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def map[T, R](self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply fn to every item; results in item order.

        An exception raised by fn propagates to the caller (after the
        remaining submitted calls have been waited for).
        """
        pending = list(items)
        if self._pool is None or len(pending) < 2:
            return [fn(item) for item in pending]

        futures: list[Future[R]] = [self._pool.submit(fn, item) for item in pending]
        first_error: Exception | None = None
        results: list[R] = []
        for future in futures:
            try:
                results.append(future.result())
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
        return results

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> OrderedDispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
