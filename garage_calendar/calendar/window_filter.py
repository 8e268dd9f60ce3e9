"""
Booking window filter.

Selects the bookings that belong to the active Day/Week/Month window and
bay filter. Day and Week match on each service's own start time; Month
matches on the booking-level ``booking_date``. The two strategies differ
on bookings whose services start on another day than ``booking_date``,
and that difference is kept as-is.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union

from garage_calendar.calendar.time_utils import day_bounds, view_window, wall_clock
from garage_calendar.schemas.booking_schema import Booking
from garage_calendar.schemas.layout_schema import ViewMode

logger = logging.getLogger(__name__)

ALL_BAYS = "all"

BayFilter = Union[str, int]


def has_services(booking: Booking) -> bool:
    return bool(booking.services)


def matches_bay(booking: Booking, bay_filter: BayFilter) -> bool:
    """True if any service bay id ends with the filter value."""
    if bay_filter is None or str(bay_filter) == ALL_BAYS:
        return True
    suffix = str(bay_filter)
    return any(
        service.bay_id is not None and service.bay_id.endswith(suffix)
        for service in booking.services
    )


def _starts_between(booking: Booking, start: datetime, end: datetime) -> bool:
    return any(
        start <= wall_clock(service.start_time) <= end
        for service in booking.services
    )


def _booked_on(booking: Booking, day: date) -> bool:
    if booking.booking_date is None:
        return False
    return booking.booking_date.date() == day


def filter_bookings(
    all_bookings: Iterable[Booking],
    mode: ViewMode,
    reference_date,
    bay_filter: BayFilter = ALL_BAYS,
) -> list[Booking]:
    """Return the bookings visible in the given view, in input order."""
    window = view_window(ViewMode(mode), reference_date)
    if window is None:
        logger.warning("Invalid reference date %r; showing an empty %s window",
                       reference_date, mode)
        return []

    first_day, last_day = window.start.date(), window.end.date()
    result: list[Booking] = []
    for booking in all_bookings:
        if not has_services(booking):
            continue
        if not matches_bay(booking, bay_filter):
            continue
        if window.mode == ViewMode.MONTH:
            if booking.booking_date is None:
                continue
            if not first_day <= booking.booking_date.date() <= last_day:
                continue
        elif not _starts_between(booking, window.start, window.end):
            continue
        result.append(booking)

    logger.debug("Window %s %s..%s: %d booking(s)", window.mode.value,
                 first_day, last_day, len(result))
    return result


def bookings_for_day(bookings: Iterable[Booking], day: date) -> list[Booking]:
    """Bookings with at least one service starting on ``day`` (Day/Week columns)."""
    start, end = day_bounds(day)
    return [b for b in bookings if has_services(b) and _starts_between(b, start, end)]


def bookings_for_month_day(bookings: Iterable[Booking], day: Optional[date]) -> list[Booking]:
    """Bookings whose ``booking_date`` falls on ``day`` (Month cells)."""
    if day is None:
        return []
    return [b for b in bookings if has_services(b) and _booked_on(b, day)]
