"""Retry policy for vendor page fetches."""

from typing import Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)


# Network errors, timeouts and non-2xx responses are all worth another try
RETRYABLE_ERRORS = (httpx.HTTPError,)


def fetch_retrying(
    total_attempts: int,
    delay_seconds: float,
    before_sleep: Optional[Callable[[RetryCallState], None]] = None,
) -> AsyncRetrying:
    """Build the retry controller for one page fetch.

    A fixed delay is used rather than exponential backoff: vendor pages
    are fetched once per cycle and the cycle interval already spaces
    requests out.

    Args:
        total_attempts: Attempts including the first one (>= 1)
        delay_seconds: Pause between attempts
        before_sleep: Hook called before each pause (logging, progress)

    Returns:
        AsyncRetrying that re-raises the last error when exhausted
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, total_attempts)),
        wait=wait_fixed(delay_seconds),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep,
        reraise=True,
    )
