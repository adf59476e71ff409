"""Retry decorator with exponential backoff and jitter for outbound calls.

Usage:
    @with_retry(max_attempts=3, retry_on=(httpx.TransportError,))
    def send(payload):
        return client.post("/emails", json=payload)
"""

import logging
import random
import time
from functools import wraps
from typing import Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> float:
    """Delay before retry number ``attempt`` (1-based).

    Without jitter: initial, initial*base, initial*base**2 ... capped at
    max_delay. Jitter scales the value by a random factor in [0.5, 1.5).
    """
    delay = min(initial_delay * (exponential_base ** (attempt - 1)), max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


def with_retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    reraise_on: Tuple[Type[Exception], ...] = (),
    retry_if: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """Retry a callable on transient failures.

    Args:
        max_attempts: Total attempts, including the first call.
        initial_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay.
        exponential_base: Growth factor between retries.
        jitter: Randomise delays so clients do not retry in lockstep.
        retry_on: Exception types eligible for retry.
        reraise_on: Exception types that abort immediately, even if they
            subclass something in ``retry_on``.
        retry_if: Optional predicate; when it returns False for a caught
            exception, that exception is raised without retrying.
        sleep: Injected for tests.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable):
        name = getattr(func, "__name__", "call")

        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except reraise_on:
                    raise
                except retry_on as exc:
                    if retry_if is not None and not retry_if(exc):
                        raise
                    if attempt >= max_attempts:
                        logger.error("Giving up on %s after %d attempts: %s", name, attempt, exc)
                        raise
                    delay = backoff_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        "Attempt %d/%d of %s failed (%s); retrying in %.2fs",
                        attempt, max_attempts, name, exc, delay,
                    )
                    sleep(delay)
            raise RuntimeError(f"{name}: retry loop exited without a result")  # pragma: no cover

        return wrapper

    return decorator
