"""
HN Front Miner

This package rebuilds the Hacker News front page history by crawling the
daily "front" archive pages and storing each day's ranked posts as JSON.

Main components:
- DayRange: The calendar days to crawl
- classify_row / assemble_posts: Listing table parsing
- DayCrawler: Page-by-page crawl of one day
- DayArchiver: One JSON file per day
- CrawlDriver: Runs the whole date range
- HnClient: Read-only client for the JSON API

Usage:
    import asyncio
    from hn_front_miner import CrawlDriver, DayArchiver, DayRange, PageFetcher

    async def main():
        async with PageFetcher() as fetcher:
            driver = CrawlDriver(fetcher, DayArchiver("data"))
            await driver.run(DayRange(2007, 10, 1))

    asyncio.run(main())
"""

from .api import HnClient
from .archive import ArchiveError, DayArchiver
from .crawler import CrawlState, DayCrawler, DayResult
from .dates import DayRange, InvalidDate, generate_all_days
from .driver import CrawlDriver, DayOutcome
from .fetcher import CrawlCancelled, FetchError, PageFetcher, Throttle
from .models import Info, More, PageParams, Post, RowType, Spacer, Thing, Unrecognized
from .parser import assemble_posts, classify_row, parse_page

__all__ = [
    'ArchiveError',
    'CrawlCancelled',
    'CrawlDriver',
    'CrawlState',
    'DayArchiver',
    'DayCrawler',
    'DayOutcome',
    'DayRange',
    'DayResult',
    'FetchError',
    'HnClient',
    'Info',
    'InvalidDate',
    'More',
    'PageFetcher',
    'PageParams',
    'Post',
    'RowType',
    'Spacer',
    'Thing',
    'Throttle',
    'Unrecognized',
    'assemble_posts',
    'classify_row',
    'generate_all_days',
    'parse_page',
]

__version__ = '1.0.0'
