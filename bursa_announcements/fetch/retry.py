import time
from typing import Callable, Optional

from .base import FetchOutcome

Backoff = Callable[[int], float]


def linear_backoff(base: float) -> Backoff:
    """Delay after attempt n is base * n seconds."""
    return lambda attempt: base * attempt


def retry(
    operation: Callable[[int], FetchOutcome],
    max_attempts: int,
    backoff: Backoff,
    sleep: Callable[[float], None] = time.sleep,
    on_failure: Optional[Callable[[int, FetchOutcome], None]] = None,
) -> FetchOutcome:
    """
    Run operation(attempt) until it succeeds or max_attempts is used up.

    Attempts are numbered from 1. The first successful outcome is returned as
    soon as it arrives; otherwise the last attempt's failure is returned
    unchanged apart from its attempt count. No sleep follows the final attempt.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    outcome: Optional[FetchOutcome] = None
    for attempt in range(1, max_attempts + 1):
        outcome = operation(attempt)
        outcome.attempts = attempt
        if outcome.ok:
            return outcome
        if on_failure is not None:
            on_failure(attempt, outcome)
        if attempt < max_attempts:
            delay = backoff(attempt)
            if delay > 0:
                sleep(delay)
    return outcome
