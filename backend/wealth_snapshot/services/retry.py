"""Retry with exponential backoff for calls to external services."""

import functools
import logging
import time
from typing import Callable

from wealth_snapshot.config import AI_BASE_DELAY, AI_MAX_ATTEMPTS

logger = logging.getLogger(__name__)


def retry_with_backoff(
    max_attempts: int = AI_MAX_ATTEMPTS,
    base_delay: float = AI_BASE_DELAY,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
) -> Callable:
    """Retry the wrapped call, sleeping base_delay, 2*base_delay, ... between attempts.

    The last failure is re-raised.
    """
    attempts = max(1, max_attempts)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            for attempt in range(1, attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts:
                        logger.error(
                            f"{func.__name__} failed after {attempts} attempts: {e}"
                        )
                        raise
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{attempts}): {str(e)[:100]}"
                    )
                    time.sleep(delay)
                    delay *= 2

        return wrapper

    return decorator
