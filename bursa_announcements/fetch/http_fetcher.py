import logging
import threading
import time
from typing import Callable, Dict, Optional

import httpx

from bursa_announcements.core.config import settings
from bursa_announcements.core.request_log import RequestLog

from .base import BaseFetcher, FetchError, FetchOutcome, ProtocolError, Timeouts, TransportError
from .buffer import ResponseBuffer
from .retry import linear_backoff, retry

logger = logging.getLogger(__name__)


def default_headers() -> Dict[str, str]:
    """Browser-like headers the announcements site expects."""
    headers = {
        "User-Agent": settings.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "Cache-Control": "max-age=0",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Referer": settings.SITE_ORIGIN.rstrip("/") + "/",
        "Origin": settings.SITE_ORIGIN.rstrip("/"),
    }
    if settings.SOURCE_COOKIE:
        headers["Cookie"] = settings.SOURCE_COOKIE
    return headers


class HttpFetcher(BaseFetcher):
    """
    Fetches one URL with bounded buffering and linear-backoff retries.

    One keep-alive httpx.Client is shared by all calls, so the whole retry
    chain runs under the instance lock: at most one fetch is in flight.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        timeouts: Optional[Timeouts] = None,
        max_redirects: Optional[int] = None,
        max_buffer_bytes: Optional[int] = None,
        request_log: Optional[RequestLog] = None,
        sleep: Callable[[float], None] = time.sleep,
        lock: Optional[threading.Lock] = None,
    ):
        self.timeouts = timeouts or Timeouts(
            connect=settings.CONNECT_TIMEOUT, transfer=settings.TRANSFER_TIMEOUT
        )
        self.client = client or httpx.Client(
            follow_redirects=True,
            max_redirects=settings.MAX_REDIRECTS if max_redirects is None else max_redirects,
            timeout=self._httpx_timeout(self.timeouts),
        )
        self.attempts = settings.FETCH_ATTEMPTS if attempts is None else attempts
        base = settings.BACKOFF_BASE_SECONDS if backoff_base is None else backoff_base
        self.backoff = linear_backoff(base)
        self.max_buffer_bytes = settings.MAX_BUFFER_BYTES if max_buffer_bytes is None else max_buffer_bytes
        self.request_log = request_log
        self._sleep = sleep
        self._lock = lock or threading.Lock()

    @staticmethod
    def _httpx_timeout(timeouts: Timeouts) -> httpx.Timeout:
        return httpx.Timeout(timeouts.transfer, connect=timeouts.connect)

    def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeouts: Optional[Timeouts] = None,
    ) -> FetchOutcome:
        request_headers = default_headers()
        if headers:
            request_headers.update(headers)
        limits = timeouts or self.timeouts

        def attempt(n: int) -> FetchOutcome:
            try:
                return FetchOutcome.success(url, self._fetch_once(url, request_headers, limits))
            except FetchError as e:
                return FetchOutcome.failure(url, e)

        with self._lock:
            outcome = retry(
                attempt,
                max_attempts=self.attempts,
                backoff=self.backoff,
                sleep=self._sleep,
                on_failure=self._record_failure,
            )

        if outcome.ok:
            logger.debug("Fetched %s in %d attempt(s), %d chars", url, outcome.attempts, len(outcome.text or ""))
        else:
            logger.warning("Giving up on %s after %d attempt(s): %s", url, outcome.attempts, outcome.detail)
        return outcome

    def _fetch_once(self, url: str, headers: Dict[str, str], timeouts: Timeouts) -> str:
        buffer = ResponseBuffer(self.max_buffer_bytes)
        deadline = time.monotonic() + timeouts.connect + timeouts.transfer
        try:
            with self.client.stream(
                "GET", url, headers=headers, timeout=self._httpx_timeout(timeouts)
            ) as response:
                if response.status_code != 200:
                    raise ProtocolError(
                        f"HTTP {response.status_code} {response.reason_phrase} for {url}",
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes():
                    buffer.append(chunk)
                    if time.monotonic() > deadline:
                        raise TransportError(f"Transfer timed out after {timeouts.transfer}s for {url}")
                return buffer.text(response.charset_encoding or "utf-8")
        except httpx.TimeoutException:
            raise TransportError(f"Timeout while fetching {url}")
        except httpx.TooManyRedirects:
            raise TransportError(f"Too many redirects for {url}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Failed to fetch {url}: {str(e) or type(e).__name__}")

    def _record_failure(self, attempt: int, outcome: FetchOutcome) -> None:
        logger.info("Fetch attempt %d/%d for %s failed: %s", attempt, self.attempts, outcome.url, outcome.detail)
        if self.request_log is not None:
            self.request_log.log("WARN", "FETCH", outcome.url, outcome.kind.value)

    def close(self) -> None:
        self.client.close()
