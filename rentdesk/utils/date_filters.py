"""
Date-range filtering for the rentals list.

A rental matches a range when it overlaps it at all: it starts inside the
range, ends inside the range, or covers the whole range.
"""

import calendar
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from models.rental import Rental
from utils.formatting import parse_timestamp


class DateFilter(str, Enum):
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


DATE_FILTER_LABELS = {
    DateFilter.WEEK: "Последние 7 дней",
    DateFilter.MONTH: "Текущий месяц",
    DateFilter.ALL: "Все время",
}


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def get_date_range(
    date_filter: DateFilter,
    now: Optional[datetime] = None
) -> Optional[Tuple[datetime, datetime]]:
    """
    Resolve a filter mode into an inclusive datetime range.

    - WEEK: start of the day six days ago through the end of today
    - MONTH: first through last moment of the current calendar month
    - ALL: None, meaning no filtering

    Args:
        date_filter: Filter mode
        now: Anchor moment, defaults to the current local time

    Returns:
        (start, end) tuple or None for ALL
    """
    date_filter = DateFilter(date_filter)
    now = parse_timestamp(now) if now is not None else datetime.now()

    if date_filter is DateFilter.WEEK:
        return start_of_day(now - timedelta(days=6)), end_of_day(now)

    if date_filter is DateFilter.MONTH:
        last_day = calendar.monthrange(now.year, now.month)[1]
        return (
            start_of_day(now.replace(day=1)),
            end_of_day(now.replace(day=last_day)),
        )

    return None


def overlaps(
    start: datetime,
    end: datetime,
    range_start: datetime,
    range_end: datetime
) -> bool:
    """Check whether [start, end] intersects the inclusive range."""
    return (
        range_start <= start <= range_end
        or range_start <= end <= range_end
        or (start <= range_start and end >= range_end)
    )


def filter_rentals(
    rentals: Iterable[Rental],
    date_filter: DateFilter,
    now: Optional[datetime] = None
) -> List[Rental]:
    """Return rentals overlapping the filter's range, keeping their order."""
    rentals = list(rentals)
    date_range = get_date_range(date_filter, now)
    if date_range is None:
        return rentals

    range_start, range_end = date_range
    return [
        rental for rental in rentals
        if overlaps(
            parse_timestamp(rental.start_date),
            parse_timestamp(rental.end_date),
            range_start,
            range_end,
        )
    ]
