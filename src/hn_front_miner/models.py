"""
Data models for HN Front Miner.

This module defines typed data structures for the rows of a front-page
listing table and the posts assembled from them.

A listing row is classified into exactly one of five kinds:

    Thing         rank/title/link row (class "athing")
    Info          score/author/age/comments row (holds a "subline")
    Spacer        decorative spacer row
    More          pagination control row
    Unrecognized  anything else, dropped silently

Every field is kept as the text found in the markup. Ranks, ids, scores,
dates and comment counts are never converted to numbers here.
"""

import re
from dataclasses import asdict, dataclass
from typing import Union

# Listing endpoint for one day of the front page archive
FRONT_URL = "https://news.ycombinator.com/front"

DAY_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


@dataclass
class Thing:
    """
    A listing entry row: rank, title and link.

    Attributes:
        id: The item identifier from the row's id attribute
        rank: Inner markup of the rank element (e.g. "1.")
        title_line: Inner markup of the title anchor
        link: The title anchor's href
    """
    id: str
    rank: str
    title_line: str
    link: str


@dataclass
class Info:
    """
    The row following a Thing: score, author, age and comment count.

    ``date`` comes from the age element's title attribute, not the
    relative "3 hours ago" text shown on the page.
    """
    score: str
    user: str
    date: str
    comments: str


@dataclass(frozen=True)
class Spacer:
    """Decorative spacer row."""


@dataclass(frozen=True)
class More:
    """Pagination control row carrying the "More" link."""


@dataclass(frozen=True)
class Unrecognized:
    """A row that could not be decoded as any other kind."""


RowType = Union[Thing, Info, Spacer, More, Unrecognized]


@dataclass
class Post:
    """
    One front page entry: a Thing merged with the Info row that follows it.

    This is the unit written to the per-day archive.

    Example:
        post = Post(
            id="1", rank="1.", title_line="Foo", link="http://a",
            score="10 points", user="alice",
            date="2007-10-02T00:00:00", comments="5 comments",
        )
    """
    id: str
    rank: str
    title_line: str
    link: str
    score: str
    user: str
    date: str
    comments: str

    @classmethod
    def from_parts(cls, thing: Thing, info: Info) -> "Post":
        """Merge a Thing and its Info into a single post."""
        return cls(**asdict(thing), **asdict(info))

    @classmethod
    def from_dict(cls, data: dict) -> "Post":
        """Rebuild a post from a dictionary read back from an archive."""
        return cls(
            id=data["id"],
            rank=data["rank"],
            title_line=data["title_line"],
            link=data["link"],
            score=data["score"],
            user=data["user"],
            date=data["date"],
            comments=data["comments"],
        )

    def to_dict(self) -> dict:
        """Convert the post to a dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class PageParams:
    """
    Identifies one fetchable page of one day's archive.

    Attributes:
        day: Calendar day formatted YYYY-MM-DD
        page: Zero-based page number
    """
    day: str
    page: int = 0

    def __post_init__(self):
        if not DAY_PATTERN.match(self.day):
            raise ValueError(f"day must be formatted YYYY-MM-DD, got {self.day!r}")
        if self.page < 0:
            raise ValueError(f"page must be >= 0, got {self.page}")

    @property
    def url(self) -> str:
        return f"{FRONT_URL}?day={self.day}&p={self.page}"

    def next(self) -> "PageParams":
        """Return the parameters of the following page of the same day."""
        return PageParams(self.day, self.page + 1)
