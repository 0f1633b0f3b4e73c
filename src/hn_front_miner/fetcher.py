"""
HTTP fetching for front page archive pages.

The crawler asks for one page at a time and treats every call as a single
attempt. Transient trouble (429, 5xx, network errors) may be retried here
with exponential backoff; anything else surfaces as FetchError.

A fixed politeness delay is kept between consecutive fetches by Throttle,
which is also where a stop request is noticed.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .models import PageParams

logger = logging.getLogger(__name__)

# Seconds to wait between two fetches
REQUEST_DELAY = 1.0
REQUEST_TIMEOUT = 10.0

# Exponential backoff settings for transient failures
MAX_RETRIES = 3
INITIAL_BACKOFF = 2

# HTTP status codes that are safe to retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}


class FetchError(Exception):
    """Raised when a page could not be fetched."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class CrawlCancelled(Exception):
    """Raised at a delay boundary once a stop has been requested."""


class Throttle:
    """
    Fixed delay between successive fetches.

    The first fetch goes out immediately; every later one waits ``delay``
    seconds first. A stop request is checked before and after each wait.
    """

    def __init__(self, delay: float = REQUEST_DELAY):
        self.delay = delay
        self.stopped = False
        self._fetched = False

    def stop(self):
        """Ask the crawl to end at the next delay boundary."""
        self.stopped = True

    async def wait(self):
        if self.stopped:
            raise CrawlCancelled()
        if self._fetched and self.delay > 0:
            await asyncio.sleep(self.delay)
            if self.stopped:
                raise CrawlCancelled()
        self._fetched = True


class PageFetcher:
    """
    Fetches listing pages as text.

    Usage:
        async with PageFetcher() as fetcher:
            html = await fetcher.fetch(PageParams("2007-10-01", 0))

    Args:
        client: Optional httpx client. If None, one is created on enter.
        throttle: Politeness delay shared by every fetch
        max_retries: Attempts for retryable failures (1 disables retrying)
        initial_backoff: First backoff delay in seconds, doubled each retry
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        throttle: Optional[Throttle] = None,
        max_retries: int = MAX_RETRIES,
        initial_backoff: float = INITIAL_BACKOFF,
        timeout: float = REQUEST_TIMEOUT
    ):
        self.client = client
        self._own_client = client is None
        self.throttle = throttle or Throttle()
        self.max_retries = max(1, max_retries)
        self.initial_backoff = initial_backoff
        self.timeout = timeout

    async def __aenter__(self) -> "PageFetcher":
        if self.client is None:
            self.client = httpx.AsyncClient(
                http2=True,
                timeout=self.timeout,
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_client and self.client is not None:
            await self.client.aclose()
            self.client = None

    async def fetch(self, params: PageParams) -> str:
        """Fetch one page of one day's listing."""
        return await self.fetch_url(params.url)

    async def fetch_url(self, url: str) -> str:
        """
        Fetch a URL and return its body.

        Raises:
            FetchError: on a non-success status or when retries run out
            CrawlCancelled: if a stop was requested before the request
        """
        if self.client is None:
            raise RuntimeError("PageFetcher must be used as an async context manager")

        await self.throttle.wait()

        attempt = 1
        backoff = self.initial_backoff
        while True:
            try:
                response = await self.client.get(url, timeout=self.timeout)
            except httpx.RequestError as e:
                logger.warning("Request error for %s: %s", url, e)
                if attempt >= self.max_retries:
                    raise FetchError(url, f"request error: {e}") from e
            else:
                if response.is_success:
                    return response.text
                status = response.status_code
                if status not in RETRYABLE_STATUS_CODES or attempt >= self.max_retries:
                    raise FetchError(url, f"HTTP {status}", status)
                logger.warning("HTTP %d for %s, retrying in %ss...", status, url, backoff)

            await asyncio.sleep(backoff)
            backoff *= 2
            attempt += 1
