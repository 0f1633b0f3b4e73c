"""
Per-day pagination over the front page archive.

For one day, pages 0, 1, 2, ... are fetched in order until a page yields
no posts (the archive has run out) or a fetch fails. Posts from every page
are concatenated in fetch order. A failed fetch keeps whatever was gathered
before it.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .fetcher import FetchError, PageFetcher
from .models import PageParams, Post
from .parser import parse_page

logger = logging.getLogger(__name__)


class CrawlState(enum.Enum):
    FETCHING = "fetching"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class DayResult:
    """
    Everything gathered for one day.

    Attributes:
        day: The day crawled (YYYY-MM-DD)
        posts: Posts from all pages, page 0 first
        state: DONE when pages ran out, FAILED when a fetch failed,
               CANCELLED when a stop was requested mid-day
        pages_fetched: Number of successful fetches
        error: The fetch failure that ended a FAILED crawl
    """
    day: str
    posts: List[Post] = field(default_factory=list)
    state: CrawlState = CrawlState.FETCHING
    pages_fetched: int = 0
    error: Optional[FetchError] = None


class DayCrawler:
    """
    Walks the pages of one day's archive.

    Args:
        fetcher: Source of page HTML
        stop_on_missing_more: Also stop after a page with no "More" control
        max_pages: Optional cap on pages fetched per day
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        stop_on_missing_more: bool = False,
        max_pages: Optional[int] = None
    ):
        self.fetcher = fetcher
        self.stop_on_missing_more = stop_on_missing_more
        self.max_pages = max_pages

    async def crawl_day(self, day: str, result: Optional[DayResult] = None) -> DayResult:
        """
        Crawl every page of *day*.

        Posts are appended to *result* as each page is parsed, so a caller
        holding it still sees the pages gathered so far if the crawl is
        interrupted.
        """
        if result is None:
            result = DayResult(day=day)
        params = PageParams(day, 0)

        while True:
            if self.max_pages is not None and params.page >= self.max_pages:
                logger.warning("%s: reached page cap of %d", day, self.max_pages)
                result.state = CrawlState.DONE
                break

            result.state = CrawlState.FETCHING
            try:
                html = await self.fetcher.fetch(params)
            except FetchError as e:
                logger.warning("%s: page %d failed: %s", day, params.page, e.reason)
                result.state = CrawlState.FAILED
                result.error = e
                break
            result.pages_fetched += 1

            result.state = CrawlState.PARSING
            page = parse_page(html)

            if not page.posts:
                if not page.table_found:
                    logger.debug("%s: page %d has no listing table", day, params.page)
                elif page.has_more:
                    logger.warning("%s: page %d has a More link but no posts", day, params.page)
                result.state = CrawlState.DONE
                break

            result.posts.extend(page.posts)
            logger.debug("%s: page %d gave %d posts", day, params.page, len(page.posts))

            if self.stop_on_missing_more and not page.has_more:
                result.state = CrawlState.DONE
                break

            params = params.next()

        return result
