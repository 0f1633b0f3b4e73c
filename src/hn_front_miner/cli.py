"""CLI interface for HN Front Miner."""

import asyncio
import contextlib
import logging
import signal
from pathlib import Path

import click
import httpx
import orjson

from .api import STORY_LISTS, HnClient, item_to_dict
from .archive import DATA_DIR, DayArchiver
from .dates import InvalidDate, parse_day
from .driver import CrawlDriver
from .fetcher import REQUEST_DELAY, CrawlCancelled, PageFetcher, Throttle

# First day of the front page archive
START_DATE = "2007-10-01"


def _echo_json(data):
    click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())


def _run_api(coro):
    """Run an API coroutine, turning HTTP failures into a clean CLI error."""
    try:
        return asyncio.run(coro)
    except httpx.HTTPError as e:
        raise click.ClickException(f"API request failed: {e}") from e


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def main(verbose):
    """HN Front Miner - rebuild the daily front page archive as JSON."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option('--start', default=START_DATE, show_default=True, help='First day to crawl (YYYY-MM-DD)')
@click.option('--data-dir', default=str(DATA_DIR), show_default=True, help='Directory for per-day JSON files')
@click.option('--delay', default=REQUEST_DELAY, show_default=True, type=float, help='Seconds between requests')
@click.option('--skip-existing', is_flag=True, help='Skip days that are already archived')
@click.option('--stop-on-missing-more', is_flag=True, help='End a day when a page has no More link')
@click.option('--max-pages', default=None, type=int, help='Maximum pages per day')
def crawl(start, data_dir, delay, skip_existing, stop_on_missing_more, max_pages):
    """Crawl every day from START up to yesterday."""
    try:
        days = parse_day(start)
    except InvalidDate as e:
        raise click.BadParameter(str(e), param_hint="--start")

    outcomes, cancelled = asyncio.run(_crawl(
        days, Path(data_dir), delay, skip_existing, stop_on_missing_more, max_pages
    ))

    failed = [o for o in outcomes if not o.ok]
    click.echo("\n" + "=" * 60)
    click.echo("Crawl stopped early" if cancelled else "Crawl complete!")
    click.echo(f"Days processed: {len(outcomes)}")
    click.echo(f"Posts archived: {sum(o.count for o in outcomes)}")
    click.echo(f"Days with errors: {len(failed)}")
    for outcome in failed:
        click.echo(f"  {outcome.day}: {outcome.error}")
    click.echo("=" * 60)


async def _crawl(days, data_dir, delay, skip_existing, stop_on_missing_more, max_pages):
    """Async crawl implementation."""
    async with PageFetcher(throttle=Throttle(delay)) as fetcher:
        driver = CrawlDriver(
            fetcher,
            DayArchiver(data_dir),
            skip_existing=skip_existing,
            stop_on_missing_more=stop_on_missing_more,
            max_pages=max_pages,
        )
        loop = asyncio.get_running_loop()
        # add_signal_handler is not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signal.SIGINT, driver.stop)
        outcomes = await driver.run(days)
    return outcomes, driver.cancelled


@main.command()
@click.argument('item_id', type=int)
def item(item_id):
    """Print one item from the JSON API."""
    async def _item():
        async with HnClient() as hn:
            return await hn.get_item(item_id)

    result = _run_api(_item())
    if result is None:
        raise click.ClickException(f"No item with id {item_id}")
    _echo_json(item_to_dict(result))


@main.command()
@click.argument('username')
def user(username):
    """Print one user profile from the JSON API."""
    async def _user():
        async with HnClient() as hn:
            return await hn.get_user(username)

    result = _run_api(_user())
    if result is None:
        raise click.ClickException(f"No user named {username}")
    _echo_json(result)


@main.command()
@click.argument('kind', type=click.Choice(sorted(STORY_LISTS)))
def stories(kind):
    """Print the ids of a named story list."""
    async def _stories():
        async with HnClient() as hn:
            return await hn.get_story_ids(kind)

    _echo_json(_run_api(_stories()))


@main.command()
@click.option('--limit', default=None, type=click.IntRange(min=1), help='Maximum number of ids to visit')
@click.option('--delay', default=REQUEST_DELAY, show_default=True, type=float, help='Seconds between requests')
def items(limit, delay):
    """Print items newest first, one JSON object per line."""
    count = _run_api(_items(limit, Throttle(delay)))
    click.echo(f"Items printed: {count}", err=True)


async def _items(limit, throttle):
    """Async item walk; Ctrl-C ends it at the next delay."""
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, throttle.stop)
    count = 0
    async with HnClient() as hn:
        try:
            async for found in hn.walk_items(limit=limit, throttle=throttle):
                click.echo(orjson.dumps(item_to_dict(found)).decode())
                count += 1
        except CrawlCancelled:
            click.echo("Item walk stopped", err=True)
    return count


@main.command()
@click.option('--data-dir', default=str(DATA_DIR), show_default=True, help='Directory containing day archives')
def stats(data_dir):
    """Show statistics about archived days."""
    archiver = DayArchiver(data_dir)
    days = archiver.archived_days()
    total_posts = sum(len(archiver.load(day)) for day in days)

    click.echo("\n" + "=" * 60)
    click.echo("HN Front Miner Statistics")
    click.echo("=" * 60)
    click.echo(f"Days archived: {len(days)}")
    if days:
        click.echo(f"First day: {days[0]}")
        click.echo(f"Last day: {days[-1]}")
    click.echo(f"Total posts: {total_posts}")
    click.echo("=" * 60 + "\n")


if __name__ == '__main__':
    main()
