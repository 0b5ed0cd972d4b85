"""Optimistic-concurrency retry for read-compute-write operations."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from stockledger.domain.exceptions import ConcurrencyConflictError

T = TypeVar("T")


def run_with_conflict_retry(
    operation: Callable[[], T],
    max_retries: int,
    logger: logging.Logger,
    description: str,
) -> T:
    """Run *operation*, re-running it on ConcurrencyConflictError.

    The operation must re-read everything it depends on each time it is
    called.  Other errors propagate immediately.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except ConcurrencyConflictError as exc:
            if attempt >= max_retries:
                raise
            attempt += 1
            logger.warning(
                "Concurrent modification during %s, retrying",
                description,
                extra={"item_id": exc.item_id, "attempt": attempt},
            )
