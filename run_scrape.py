#!/usr/bin/env python3
"""
Entry point for the HN Front Miner crawl.

Crawls the front page archive from 2007-10-01 up to yesterday, one day at a
time, and writes each day to data/{day}.json.

Usage:
    python run_scrape.py

Press Ctrl+C to stop: the day in progress is archived with the posts
gathered so far, then the run ends. Re-running rewrites every day; use
`hn-miner crawl --skip-existing` to continue from where a run stopped.
"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

# Add src to path to import the package
# This allows running the script from repository root
sys.path.insert(0, str(Path(__file__).parent / "src"))

from hn_front_miner.archive import DayArchiver
from hn_front_miner.dates import DayRange
from hn_front_miner.driver import CrawlDriver
from hn_front_miner.fetcher import PageFetcher


async def crawl():
    days = DayRange(2007, 10, 1)
    print(f"Days to crawl: {len(days)}")

    async with PageFetcher() as fetcher:
        driver = CrawlDriver(fetcher, DayArchiver(Path("data")))
        try:
            asyncio.get_running_loop().add_signal_handler(signal.SIGINT, driver.stop)
        except NotImplementedError:
            # Windows event loops: Ctrl+C falls through as KeyboardInterrupt
            pass
        outcomes = await driver.run(days)

    for outcome in outcomes:
        status = "ok" if outcome.ok else f"error: {outcome.error}"
        print(f"{outcome.day} {outcome.count} posts ({status})")


def main():
    """Run the crawl with default settings."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("HN Front Miner - Archive Crawl")
    print("=" * 60)
    print()
    asyncio.run(crawl())


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n⚠️  Crawl interrupted by user")
        sys.exit(0)
