"""
Read-only client for the Hacker News JSON API.

Separate from the front page crawl: this talks to the Firebase API, which
serves single items, users and lists of item ids.

Usage:
    async with HnClient() as hn:
        max_id = await hn.get_max_item_id()
        item = await hn.get_item(max_id)
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import AsyncIterator, List, Optional, Union

import httpx

from .fetcher import Throttle

logger = logging.getLogger(__name__)

API_BASE_URL = "https://hacker-news.firebaseio.com/v0"
API_TIMEOUT = 10.0

# Named id-list endpoints
STORY_LISTS = {
    "top": "topstories",
    "new": "newstories",
    "best": "beststories",
    "ask": "askstories",
    "show": "showstories",
    "job": "jobstories",
}


def _from_dict(cls, data: dict):
    """Build dataclass *cls* from *data*, ignoring keys it does not declare."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class Story:
    """A story. ``time`` is Unix time, ``text`` is HTML."""
    id: int
    by: str = ""
    time: int = 0
    title: str = ""
    score: int = 0
    descendants: int = 0
    kids: List[int] = field(default_factory=list)
    url: Optional[str] = None
    text: Optional[str] = None


@dataclass
class Comment:
    """A comment; ``parent`` is another comment or the story."""
    id: int
    by: str = ""
    time: int = 0
    parent: int = 0
    text: str = ""
    kids: List[int] = field(default_factory=list)


@dataclass
class Job:
    id: int
    time: int = 0
    title: str = ""
    score: int = 0
    url: Optional[str] = None
    text: Optional[str] = None


@dataclass
class Poll:
    id: int
    by: str = ""
    time: int = 0
    title: str = ""
    score: int = 0
    descendants: int = 0
    kids: List[int] = field(default_factory=list)
    parts: List[int] = field(default_factory=list)
    text: Optional[str] = None


@dataclass
class Pollopt:
    """A poll option belonging to ``poll``; ``score`` is its votes."""
    id: int
    by: str = ""
    time: int = 0
    poll: int = 0
    score: int = 0
    text: Optional[str] = None


Item = Union[Story, Comment, Job, Poll, Pollopt]

ITEM_TYPES = {
    "story": Story,
    "comment": Comment,
    "job": Job,
    "poll": Poll,
    "pollopt": Pollopt,
}


@dataclass
class User:
    """
    A user profile.

    Attributes:
        id: Case-sensitive username
        created: Unix time the account was created
        karma: The user's karma
        delay: Minutes before the user's comments become visible
        about: Optional self-description (HTML)
        submitted: Ids of the user's stories, polls and comments
    """
    id: str
    created: int = 0
    karma: int = 0
    delay: Optional[int] = None
    about: Optional[str] = None
    submitted: List[int] = field(default_factory=list)


@dataclass
class Updates:
    """Recently changed items and profiles."""
    items: List[int] = field(default_factory=list)
    profiles: List[str] = field(default_factory=list)


def item_from_dict(data: Optional[dict]) -> Optional[Item]:
    """
    Decode an item by its ``type`` field.

    Returns None for a null body (the API's answer for an unknown id).

    Raises:
        ValueError: if the type is missing or unknown
    """
    if data is None:
        return None
    item_type = data.get("type")
    cls = ITEM_TYPES.get(item_type)
    if cls is None:
        raise ValueError(f"Unknown item type: {item_type!r}")
    return _from_dict(cls, data)


def item_to_dict(item: Item) -> dict:
    """Convert an item back to the API's shape, including its type."""
    data = asdict(item)
    for name, cls in ITEM_TYPES.items():
        if isinstance(item, cls):
            data["type"] = name
    return data


class HnClient:
    """
    Async client for the Hacker News API.

    Args:
        client: Optional httpx client. If None, one is created on enter.
        base_url: API root
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = API_BASE_URL
    ):
        self.client = client
        self._own_client = client is None
        self.base_url = base_url.rstrip("/")

    async def __aenter__(self) -> "HnClient":
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=API_TIMEOUT)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._own_client and self.client is not None:
            await self.client.aclose()
            self.client = None

    async def _get_json(self, path: str):
        if self.client is None:
            raise RuntimeError("HnClient must be used as an async context manager")
        url = f"{self.base_url}/{path}.json"
        logger.debug("GET %s", url)
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def get_item(self, item_id: int) -> Optional[Item]:
        """Return the item with *item_id*, or None if the id is invalid."""
        return item_from_dict(await self._get_json(f"item/{item_id}"))

    async def get_user(self, username: str) -> Optional[User]:
        """Return the user *username*, or None if no such user exists."""
        data = await self._get_json(f"user/{username}")
        if data is None:
            return None
        return _from_dict(User, data)

    async def get_max_item_id(self) -> int:
        """Return the id of the newest item."""
        return await self._get_json("maxitem")

    async def get_story_ids(self, kind: str) -> List[int]:
        """Return the ids of one of the named story lists (see STORY_LISTS)."""
        try:
            path = STORY_LISTS[kind]
        except KeyError:
            raise ValueError(f"Unknown story list: {kind!r}") from None
        return await self._get_json(path)

    async def get_top_stories(self) -> List[int]:
        return await self.get_story_ids("top")

    async def get_new_stories(self) -> List[int]:
        return await self.get_story_ids("new")

    async def get_best_stories(self) -> List[int]:
        return await self.get_story_ids("best")

    async def get_ask_stories(self) -> List[int]:
        """Up to 200 latest Ask HN stories."""
        return await self.get_story_ids("ask")

    async def get_show_stories(self) -> List[int]:
        """Up to 200 latest Show HN stories."""
        return await self.get_story_ids("show")

    async def get_job_stories(self) -> List[int]:
        """Up to 200 latest job stories."""
        return await self.get_story_ids("job")

    async def get_updates(self) -> Updates:
        """Return recently changed items and profiles."""
        return _from_dict(Updates, await self._get_json("updates"))

    async def walk_items(
        self,
        limit: Optional[int] = None,
        throttle: Optional[Throttle] = None
    ) -> AsyncIterator[Item]:
        """
        Yield items from the newest id downward.

        Every request goes through *throttle*. Ids that fail to load or
        come back null are logged and skipped.

        Args:
            limit: Maximum number of ids to visit, None walks down to id 1
            throttle: Delay between requests; defaults to Throttle()

        Raises:
            CrawlCancelled: if the throttle was stopped
        """
        throttle = throttle or Throttle()
        await throttle.wait()
        max_id = await self.get_max_item_id()
        logger.info("Walking items down from %d", max_id)

        last_id = 0 if limit is None else max(0, max_id - limit)
        for item_id in range(max_id, last_id, -1):
            await throttle.wait()
            try:
                item = await self.get_item(item_id)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Item %d failed: %s", item_id, e)
                continue
            if item is None:
                logger.debug("Item %d is null, skipping", item_id)
                continue
            yield item
