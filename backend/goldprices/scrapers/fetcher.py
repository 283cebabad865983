"""HTTP page fetching with bounded retries and progress reporting."""

from typing import Optional

import httpx
import structlog
from tenacity import RetryCallState

from goldprices.core.exceptions import FetchError
from goldprices.scrapers.base import ProgressCallback
from goldprices.scrapers.utils.retry import fetch_retrying
from goldprices.scrapers.utils.user_agents import build_headers


logger = structlog.get_logger(__name__)


class _AttemptProgress:
    """Maps per-attempt milestones onto a single 0-100 scale.

    Attempt k of n owns the band [(k-1)/n, k/n) so reported values
    never go backwards across retries.
    """

    # Fractions of an attempt's band
    START = 0.0
    SENT = 0.5
    RETRY_WAIT = 0.9

    def __init__(self, total_attempts: int, on_progress: Optional[ProgressCallback]):
        self.total_attempts = max(1, total_attempts)
        self.on_progress = on_progress
        self.last = 0

    def report(self, attempt_number: int, fraction: float) -> None:
        if self.on_progress is None:
            return
        band = 100 / self.total_attempts
        value = int((attempt_number - 1) * band + fraction * band)
        value = max(self.last, min(99, value))
        self.last = value
        self.on_progress(value)

    def done(self) -> None:
        if self.on_progress is not None:
            self.last = 100
            self.on_progress(100)


class Fetcher:
    """Fetches vendor pages over HTTP.

    Args:
        timeout: Per-attempt timeout in seconds
        retry_attempts: Retries after the first attempt
        retry_delay: Fixed pause between attempts in seconds
        user_agent: Fixed User-Agent; rotated when omitted
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        retry_attempts: int = 2,
        retry_delay: float = 1.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if retry_attempts < 0:
            raise ValueError("retry_attempts must be >= 0")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.user_agent = user_agent
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=build_headers(self.user_agent),
            follow_redirects=True,
            transport=self.transport,
        )

    async def fetch(
        self,
        url: str,
        on_progress: Optional[ProgressCallback] = None,
        vendor: Optional[str] = None,
        attempts: Optional[int] = None,
    ) -> str:
        """GET a page and return its body text.

        Args:
            url: Page URL
            on_progress: Receives monotonic 0-100 fetch progress
            vendor: Vendor name for logs and errors
            attempts: Total attempts override (defaults to retry_attempts + 1)

        Returns:
            Response body as text

        Raises:
            FetchError: When every attempt failed
        """
        total_attempts = attempts if attempts is not None else self.retry_attempts + 1
        vendor = vendor or url
        progress = _AttemptProgress(total_attempts, on_progress)
        log = logger.bind(vendor=vendor, url=url)

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            log.warning(
                "fetch_attempt_failed",
                attempt=retry_state.attempt_number,
                total_attempts=total_attempts,
                error=_error_message(error),
            )
            progress.report(retry_state.attempt_number, _AttemptProgress.RETRY_WAIT)

        retrying = fetch_retrying(total_attempts, self.retry_delay, before_sleep=before_sleep)
        attempt_number = 0

        try:
            async with self._client() as client:
                async for attempt in retrying:
                    with attempt:
                        attempt_number = attempt.retry_state.attempt_number
                        progress.report(attempt_number, _AttemptProgress.START)
                        response = await client.get(url)
                        progress.report(attempt_number, _AttemptProgress.SENT)
                        response.raise_for_status()
                        html = response.text
        except httpx.HTTPError as e:
            log.error("fetch_failed", attempts=attempt_number, error=_error_message(e))
            raise FetchError(vendor, url, attempt_number, _error_message(e)) from e

        progress.done()
        log.debug("fetch_succeeded", attempts=attempt_number, size=len(html))
        return html


def _error_message(error: Optional[BaseException]) -> str:
    if error is None:
        return "unknown error"
    return str(error) or error.__class__.__name__
