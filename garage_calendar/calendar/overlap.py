"""
Overlap and stacking engine.

Assigns each booking in a day column a horizontal lane so that bookings
in different bays whose time ranges overlap are drawn side by side.

Counting is incremental, left to right over bookings sorted by start
minute: a booking's lane is the number of earlier bookings it overlaps
in a different bay. Earlier bookings never move when later ones are
added. Dense clusters can use more lanes than a true interval colouring
would. Same-bay overlaps are not counted.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from garage_calendar.calendar.time_utils import minutes_from_midnight
from garage_calendar.schemas.booking_schema import Booking
from garage_calendar.schemas.layout_schema import LayoutBlock

logger = logging.getLogger(__name__)


def booking_span(
    booking: Booking,
    day: Optional[date] = None,
) -> Optional[tuple[int, int, Optional[str]]]:
    """(start_min, end_min, bay_id) for a booking, or None if it can't be placed.

    The start is the earliest service start; with ``day`` only services
    starting on that day are considered. The end is start plus the
    booking's total duration, or the latest service end when no total is
    recorded. The bay is the one of the earliest service.
    """
    services = booking.services
    if day is not None:
        services = [s for s in services if s.start_time.date() == day]
    if not services:
        return None

    first = min(services, key=lambda s: minutes_from_midnight(s.start_time))
    start_min = minutes_from_midnight(first.start_time)

    duration = booking.total_duration
    if duration is None:
        last_end = max(s.end_time for s in booking.services)
        duration = int((last_end - first.start_time).total_seconds() // 60)
    if not isinstance(duration, int) or isinstance(duration, bool) or duration < 0:
        logger.debug("Booking %s has unusable duration %r", booking.id, duration)
        return None

    return start_min, start_min + duration, first.bay_id


def _overlaps(a: LayoutBlock, b: LayoutBlock) -> bool:
    return a.end_minute > b.start_minute and a.start_minute < b.end_minute


def stack_bookings(
    bookings: Iterable[Booking],
    day: Optional[date] = None,
) -> list[tuple[LayoutBlock, Booking]]:
    """Blocks paired with the booking each was built from, sorted by start."""
    placed: list[tuple[LayoutBlock, Booking]] = []
    for booking in bookings:
        span = booking_span(booking, day)
        if span is None:
            continue
        start_min, end_min, bay_id = span
        placed.append((
            LayoutBlock(
                booking_id=booking.id,
                start_minute=start_min,
                end_minute=end_min,
                bay_id=bay_id,
            ),
            booking,
        ))

    placed.sort(key=lambda pair: pair[0].start_minute)

    for i, (current, _) in enumerate(placed):
        overlap_count = 0
        for earlier, _ in placed[:i]:
            if _overlaps(earlier, current) and earlier.bay_id != current.bay_id:
                overlap_count += 1
        current.stack_offset_index = overlap_count

    return placed


def compute_layout_blocks(bookings: Iterable[Booking], day: Optional[date] = None) -> list[LayoutBlock]:
    """Compute stacking lanes for the bookings of one column.

    Returns blocks sorted by start minute (stable for ties).
    """
    return [block for block, _ in stack_bookings(bookings, day)]
