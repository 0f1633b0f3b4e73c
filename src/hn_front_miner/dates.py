"""
Calendar day ranges for the front page archive.

The archive is crawled one day at a time, from a fixed start date up to
(but not including) today.
"""

import re
from datetime import date, timedelta
from typing import Callable, Iterator, Optional

DAY_FORMAT = "%Y-%m-%d"

# ASCII digits only; str.isdigit and \d also accept other scripts
DAY_STRING = re.compile(r"^([0-9]{4})-([0-9]{1,2})-([0-9]{1,2})$")


class InvalidDate(ValueError):
    """Raised when a start date does not exist on the calendar."""

    def __init__(self, value: str, reason: str):
        self.value = value
        super().__init__(f"Invalid start date {value}: {reason}")


class DayRange:
    """
    Lazy, restartable sequence of ``YYYY-MM-DD`` strings.

    The start date is validated when the range is created. The end of the
    range is read from ``today`` each time iteration begins, so a range
    kept around in a long-running process picks up new days.

    Args:
        start_year: Year of the first day
        start_month: Month of the first day (1-12)
        start_day: Day of month of the first day
        today: Callable returning the exclusive upper bound; defaults to
               ``date.today``

    Example:
        days = DayRange(2007, 10, 1, today=lambda: date(2007, 10, 3))
        list(days)
        # Returns: ["2007-10-01", "2007-10-02"]
    """

    def __init__(
        self,
        start_year: int,
        start_month: int,
        start_day: int,
        today: Optional[Callable[[], date]] = None
    ):
        try:
            self.start = date(start_year, start_month, start_day)
        except (TypeError, ValueError) as e:
            raise InvalidDate(f"{start_year}-{start_month}-{start_day}", str(e)) from e
        self._today = today or date.today

    def __iter__(self) -> Iterator[str]:
        end = self._today()
        current = self.start
        while current < end:
            yield current.strftime(DAY_FORMAT)
            current += timedelta(days=1)

    def __len__(self) -> int:
        return max(0, (self._today() - self.start).days)

    def __repr__(self) -> str:
        return f"DayRange(start={self.start.isoformat()})"


def generate_all_days(start_year: int, start_month: int, start_day: int) -> DayRange:
    """Return every day from the given date up to yesterday."""
    return DayRange(start_year, start_month, start_day)


def parse_day(value: str) -> DayRange:
    """
    Build a range from a ``YYYY-MM-DD`` string (used by the CLI).

    Raises:
        InvalidDate: if the string is not a real calendar date
    """
    match = DAY_STRING.match(value)
    if match is None:
        raise InvalidDate(value, "expected YYYY-MM-DD")
    year, month, day = (int(p) for p in match.groups())
    return DayRange(year, month, day)
