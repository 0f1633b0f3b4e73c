"""
Listing table parsing for front page archive pages.

A front page is one table whose rows come in a fixed rhythm:

    <tr class="athing" id="...">   rank, title, link        -> Thing
    <tr><td class="subtext">...    score, user, age, comments -> Info
    <tr class="spacer">                                     -> Spacer
    ...
    <tr><td><a class="morelink">More</a>                    -> More

Each row is classified once into a RowType, then the assembler pairs every
Thing with the row immediately after it. Every markup lookup returns None
instead of raising, so one malformed row only costs that row.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from .models import Info, More, Post, RowType, Spacer, Thing, Unrecognized

logger = logging.getLogger(__name__)

# Anchors whose text contains this are the comment-count link
COMMENTS_MARKER = "comments"


# Listing table selectors, older markup first
LISTING_TABLE_SELECTORS = (
    'table.itemlist',
    'tr#bigbox table',
)


def find_listing_table(soup: Tag) -> Optional[Tag]:
    """Return the page's listing table, or None if no selector matches."""
    for selector in LISTING_TABLE_SELECTORS:
        table = soup.select_one(selector)
        if table is not None:
            return table
    return None


@dataclass
class PageResult:
    """
    Outcome of parsing one listing page.

    Attributes:
        posts: Assembled posts in source row order
        table_found: False when the listing table is missing entirely
        has_more: True when the table ends with a "More" control
    """
    posts: List[Post] = field(default_factory=list)
    table_found: bool = True
    has_more: bool = False


def _find(tag: Optional[Tag], selector: str) -> Optional[Tag]:
    """Return the first descendant matching *selector*, or None."""
    if tag is None:
        return None
    return tag.select_one(selector)


def _row_classes(row: Tag) -> List[str]:
    classes = row.get("class")
    if classes is None:
        return []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)


def _extract_thing(row: Tag) -> Optional[Thing]:
    item_id = row.get("id")
    anchor = _find(row, "td > span > a")
    rank = _find(row, ".rank")
    if not item_id or anchor is None or rank is None:
        return None

    link = anchor.get("href")
    if link is None:
        return None

    return Thing(
        id=item_id,
        rank=rank.decode_contents(),
        title_line=anchor.decode_contents(),
        link=link,
    )


def _find_comments_anchor(subline: Tag) -> Optional[Tag]:
    for anchor in subline.find_all("a"):
        if COMMENTS_MARKER in anchor.get_text():
            return anchor
    return None


def _extract_info(subline: Tag) -> Optional[Info]:
    score = _find(subline, ".score")
    user = _find(subline, ".hnuser")
    age = _find(subline, ".age")
    date = age.get("title") if age is not None else None
    comments = _find_comments_anchor(subline)
    if score is None or user is None or date is None or comments is None:
        return None

    return Info(
        score=score.get_text(),
        user=user.get_text(),
        date=date,
        comments=comments.get_text(),
    )


def classify_row(row: Tag) -> RowType:
    """
    Classify one table row.

    Never raises for missing markup: a row that cannot be fully decoded is
    returned as Unrecognized.
    """
    classes = _row_classes(row)

    if "spacer" in classes:
        return Spacer()

    if "athing" in classes:
        thing = _extract_thing(row)
        if thing is None:
            logger.debug("Unrecognized athing row: id=%r", row.get("id"))
            return Unrecognized()
        return thing

    if _find(row, "a.morelink") is not None:
        return More()

    subline = _find(row, ".subline")
    if subline is None:
        return Unrecognized()

    info = _extract_info(subline)
    if info is None:
        logger.debug("Unrecognized subline row")
        return Unrecognized()
    return info


def assemble_posts(rows: Iterable[RowType]) -> List[Post]:
    """
    Pair each Thing with the Info row immediately after it.

    Only one Thing is ever pending. If the row after a Thing is not an Info,
    the Thing is dropped and that row is considered again on its own, so a
    Thing followed by another Thing keeps only the second one as a candidate.
    Rows outside a pairing (spacers, More, stray Info, Unrecognized) are
    ignored.
    """
    posts: List[Post] = []
    pending: Optional[Thing] = None

    for row in rows:
        if pending is not None:
            thing, pending = pending, None
            if isinstance(row, Info):
                posts.append(Post.from_parts(thing, row))
                continue
            logger.debug("Dropping item %s: followed by %s", thing.id, type(row).__name__)

        if isinstance(row, Thing):
            pending = row

    if pending is not None:
        logger.debug("Dropping item %s: last row of the table", pending.id)

    return posts


def listing_rows(table: Tag) -> List[Tag]:
    """Return the table's own rows, with or without a tbody wrapper."""
    return table.select(":scope > tr, :scope > tbody > tr")


def parse_page(html: str) -> PageResult:
    """
    Parse a listing page into posts.

    A page without a listing table reports ``table_found=False`` and no
    posts, which callers can tell apart from a table with zero rows.
    """
    soup = BeautifulSoup(html, "lxml")
    table = find_listing_table(soup)
    if table is None:
        return PageResult(posts=[], table_found=False, has_more=False)

    rows = [classify_row(row) for row in listing_rows(table)]
    return PageResult(
        posts=assemble_posts(rows),
        table_found=True,
        has_more=any(isinstance(row, More) for row in rows),
    )
