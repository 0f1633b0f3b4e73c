"""
Per-day archive files.

Each crawled day is stored as ``{data_dir}/{day}.json``: a JSON array of
post objects. Writing a day again replaces the whole file.
"""

import contextlib
import logging
import os
from pathlib import Path
from typing import List, Sequence, Union

import orjson

from .models import DAY_PATTERN, Post

logger = logging.getLogger(__name__)

DATA_DIR = Path("data")


class ArchiveError(Exception):
    """Raised when a day archive cannot be written or read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Archive error for {path}: {reason}")


class DayArchiver:
    """
    Writes one JSON file per day.

    Usage:
        archiver = DayArchiver(Path("data"))
        count = archiver.write("2007-10-01", posts)
    """

    def __init__(self, data_dir: Union[str, Path] = DATA_DIR):
        self.data_dir = Path(data_dir)

    def path_for(self, day: str) -> Path:
        """Return the archive path of *day*."""
        if not DAY_PATTERN.match(day):
            raise ValueError(f"day must be formatted YYYY-MM-DD, got {day!r}")
        return self.data_dir / f"{day}.json"

    def exists(self, day: str) -> bool:
        return self.path_for(day).exists()

    def write(self, day: str, posts: Sequence[Post]) -> int:
        """
        Serialize *posts* to the day's file, replacing any previous content.

        The data goes to a temporary file first, is synced to disk, then
        renamed over the destination, so readers never see half a file.

        Returns:
            Number of posts written

        Raises:
            ArchiveError: if the file cannot be created or written
        """
        path = self.path_for(day)
        data = orjson.dumps([post.to_dict() for post in posts], option=orjson.OPT_INDENT_2)
        tmp = path.with_suffix('.tmp')

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            logger.error("Could not write archive %s: %s", path, e)
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise ArchiveError(path, str(e)) from e

        return len(posts)

    def load(self, day: str) -> List[Post]:
        """Read a day's archive back into posts."""
        path = self.path_for(day)
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise ArchiveError(path, str(e)) from e
        return [Post.from_dict(item) for item in data]

    def archived_days(self) -> List[str]:
        """Sorted list of days that have an archive file."""
        if not self.data_dir.exists():
            return []
        return sorted(
            p.stem for p in self.data_dir.glob("*.json")
            if DAY_PATTERN.match(p.stem)
        )
