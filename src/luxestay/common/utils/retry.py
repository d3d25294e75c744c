import random

from luxestay.common.utils.constants import (
    RETRY_BASE_DELAY_SECONDS,
    RETRY_MAX_DELAY_SECONDS,
)


def backoff_delay(attempt: int) -> float:
    """Full-jitter exponential delay to wait after failed attempt ``attempt``."""
    ceiling = min(RETRY_MAX_DELAY_SECONDS, RETRY_BASE_DELAY_SECONDS * 2 ** (attempt - 1))
    return random.uniform(0, ceiling)
