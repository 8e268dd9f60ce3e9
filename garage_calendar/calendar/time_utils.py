"""Date and time helpers shared by the calendar views."""

import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from garage_calendar.schemas.layout_schema import ViewMode, ViewWindow
from garage_calendar.utils import parse_timestamp

logger = logging.getLogger(__name__)

MINUTES_IN_DAY = 24 * 60
END_OF_DAY = time(23, 59, 59, 999999)

DateLike = Union[date, datetime]


def minutes_from_midnight(timestamp: Union[str, datetime]) -> int:
    """Return hour*60 + minute of the timestamp's wall-clock time."""
    value = parse_timestamp(timestamp)
    return value.hour * 60 + value.minute


def _as_date(reference: DateLike) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def week_dates(reference: DateLike) -> list[date]:
    """Seven consecutive dates of the Sunday-first week containing ``reference``."""
    day = _as_date(reference)
    # date.weekday() is Monday=0; shift so Sunday=0.
    days_since_sunday = (day.weekday() + 1) % 7
    start = day - timedelta(days=days_since_sunday)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(reference: DateLike) -> list[list[Optional[date]]]:
    """Sunday-first weeks covering the month, padded with None."""
    day = _as_date(reference)
    first = day.replace(day=1)
    days_in_month = calendar.monthrange(first.year, first.month)[1]

    leading = (first.weekday() + 1) % 7
    cells: list[Optional[date]] = [None] * leading
    cells.extend(first + timedelta(days=i) for i in range(days_in_month))
    cells.extend([None] * ((7 - len(cells) % 7) % 7))

    return [cells[i:i + 7] for i in range(0, len(cells), 7)]


def day_bounds(day: DateLike) -> tuple[datetime, datetime]:
    """First and last instant of a calendar day."""
    d = _as_date(day)
    return datetime.combine(d, time.min), datetime.combine(d, END_OF_DAY)


def coerce_reference(reference) -> Optional[date]:
    """Turn a date, datetime or ISO string into a date; None if unusable."""
    if isinstance(reference, (date, datetime)):
        return _as_date(reference)
    if isinstance(reference, str):
        try:
            return parse_timestamp(reference).date()
        except ValueError:
            logger.debug("Unparseable reference date: %r", reference)
            return None
    return None


def view_window(mode: ViewMode, reference) -> Optional[ViewWindow]:
    """Compute the window a view covers, or None for an invalid reference."""
    day = coerce_reference(reference)
    if day is None:
        return None

    if mode == ViewMode.DAY:
        start, end = day_bounds(day)
    elif mode == ViewMode.WEEK:
        dates = week_dates(day)
        start, _ = day_bounds(dates[0])
        _, end = day_bounds(dates[-1])
    else:
        first = day.replace(day=1)
        last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
        start, _ = day_bounds(first)
        _, end = day_bounds(last)

    return ViewWindow(mode=mode, start=start, end=end)


def format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


def wall_clock(value: datetime) -> datetime:
    """Drop tzinfo while keeping the wall-clock fields."""
    return value.replace(tzinfo=None)
