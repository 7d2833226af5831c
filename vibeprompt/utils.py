"""Backoff utilities for the structured generation retry loop."""

MAX_ATTEMPTS = 3
BASE_DELAY = 1.0
MAX_DELAY = 5.0


def backoff_delay(attempt: int, base_delay: float = BASE_DELAY, max_delay: float = MAX_DELAY) -> float:
    """
    Seconds to wait after failed attempt number ``attempt`` (1-based).

    Linear in the attempt number and capped, so the wait never shrinks
    between retries and the worst-case latency of a request stays bounded.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    if base_delay <= 0:
        raise ValueError(f"base_delay must be > 0, got {base_delay}")
    return min(base_delay * attempt, max(max_delay, base_delay))


def max_total_backoff(max_attempts: int, base_delay: float = BASE_DELAY, max_delay: float = MAX_DELAY) -> float:
    """Upper bound on time spent sleeping across one model's attempt budget."""
    return sum(backoff_delay(a, base_delay, max_delay) for a in range(1, max_attempts))

