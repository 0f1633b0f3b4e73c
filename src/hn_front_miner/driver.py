"""
Multi-day crawl over the front page archive.

Days are processed strictly one after another: crawl every page of a day,
write its archive, report, move on. A failed fetch or a failed write only
affects the day it happened on.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from tqdm import tqdm

from .archive import ArchiveError, DayArchiver
from .crawler import CrawlState, DayCrawler, DayResult
from .fetcher import CrawlCancelled, PageFetcher

logger = logging.getLogger(__name__)


@dataclass
class DayOutcome:
    """
    What happened to one day.

    Attributes:
        day: The day (YYYY-MM-DD)
        count: Posts written to the archive (0 if the write failed)
        state: Final crawl state of the day
        error: Fetch or archive failure message, if any
        archived: False when the day's file could not be written
    """
    day: str
    count: int
    state: CrawlState
    error: Optional[str] = None
    archived: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None


class CrawlDriver:
    """
    Crawls and archives a sequence of days.

    Usage:
        async with PageFetcher() as fetcher:
            driver = CrawlDriver(fetcher, DayArchiver("data"))
            outcomes = await driver.run(DayRange(2007, 10, 1))

    Args:
        fetcher: Page source, shared by every day
        archiver: Destination of the per-day files
        skip_existing: Skip days that already have an archive file
        stop_on_missing_more: Passed to each DayCrawler
        max_pages: Passed to each DayCrawler
        progress: Show a tqdm progress bar
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        archiver: DayArchiver,
        skip_existing: bool = False,
        stop_on_missing_more: bool = False,
        max_pages: Optional[int] = None,
        progress: bool = True
    ):
        self.fetcher = fetcher
        self.archiver = archiver
        self.skip_existing = skip_existing
        self.crawler = DayCrawler(
            fetcher,
            stop_on_missing_more=stop_on_missing_more,
            max_pages=max_pages,
        )
        self.progress = progress
        self.cancelled = False

    def stop(self):
        """Request the crawl to end at the next delay boundary."""
        self.fetcher.throttle.stop()

    def _archive(self, result: DayResult) -> DayOutcome:
        if result.state == CrawlState.CANCELLED:
            error = "crawl stopped"
        else:
            error = str(result.error) if result.error else None
        try:
            count = self.archiver.write(result.day, result.posts)
        except ArchiveError as e:
            logger.error("%s: archive failed: %s", result.day, e.reason)
            return DayOutcome(result.day, 0, result.state, str(e), archived=False)

        if result.state == CrawlState.CANCELLED:
            logger.warning("%s: stopped after %d pages, archived %d posts",
                           result.day, result.pages_fetched, count)
        elif result.state == CrawlState.FAILED:
            logger.error("%s: fetch failed after %d pages, archived %d posts: %s",
                         result.day, result.pages_fetched, count, result.error)
        else:
            logger.info("%s: archived %d posts from %d pages",
                        result.day, count, result.pages_fetched)
        return DayOutcome(result.day, count, result.state, error)

    async def run(self, days: Iterable[str]) -> List[DayOutcome]:
        """
        Crawl every day in order and archive each one.

        Returns one outcome per processed day. Ends early, after archiving
        the partial day in progress, if stop() was called.
        """
        outcomes: List[DayOutcome] = []
        day_list = list(days)

        with tqdm(total=len(day_list), desc="Crawling days", disable=not self.progress) as pbar:
            for day in day_list:
                if self.skip_existing and self.archiver.exists(day):
                    logger.debug("%s: already archived, skipping", day)
                    pbar.update(1)
                    continue

                result = DayResult(day=day)
                try:
                    await self.crawler.crawl_day(day, result)
                except CrawlCancelled:
                    logger.warning("%s: crawl stopped, archiving %d posts gathered so far",
                                   day, len(result.posts))
                    result.state = CrawlState.CANCELLED
                    self.cancelled = True
                    outcomes.append(self._archive(result))
                    break

                outcomes.append(self._archive(result))
                pbar.update(1)

        succeeded = sum(1 for o in outcomes if o.ok)
        logger.info("Crawl complete: %d days ok, %d with errors, %d posts",
                    succeeded, len(outcomes) - succeeded, sum(o.count for o in outcomes))
        return outcomes
