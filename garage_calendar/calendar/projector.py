"""
Layout projector.

Turns abstract layout blocks into pixel geometry for the Day, Week and
Month views and decides how much detail each booking block shows.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from garage_calendar.calendar.overlap import stack_bookings
from garage_calendar.calendar.time_utils import (
    MINUTES_IN_DAY,
    coerce_reference,
    format_hour,
    month_grid,
    week_dates,
)
from garage_calendar.calendar.window_filter import bookings_for_day, bookings_for_month_day
from garage_calendar.config import LayoutConfig, settings
from garage_calendar.schemas.booking_schema import Booking
from garage_calendar.schemas.layout_schema import (
    DayColumn,
    DayLayout,
    DetailLevel,
    LayoutBlock,
    MonthCell,
    MonthEntry,
    MonthLayout,
    ProjectedBlock,
    ServiceLine,
    ViewMode,
    WeekLayout,
)
from garage_calendar.utils import bay_number

logger = logging.getLogger(__name__)

BAY_COLORS: dict[int, str] = {
    1: "#3b82f6",  # blue
    2: "#22c55e",  # green
    3: "#f59e0b",  # amber
    4: "#a855f7",  # purple
    5: "#ef4444",  # red
    6: "#14b8a6",  # teal
    7: "#ec4899",  # pink
    8: "#6366f1",  # indigo
    9: "#84cc16",  # lime
}
NEUTRAL_COLOR = "#9ca3af"


def bay_color(bay_id: Optional[str]) -> str:
    """Palette colour for a bay id, keyed by its trailing number."""
    return BAY_COLORS.get(bay_number(bay_id), NEUTRAL_COLOR)


def detail_level(block: LayoutBlock, config: LayoutConfig = settings.layout) -> DetailLevel:
    if block.duration_minutes >= config.detail_threshold_minutes:
        return DetailLevel.FULL
    return DetailLevel.CONDENSED


@dataclass(frozen=True)
class _ViewGeometry:
    base_offset_px: int
    width_percent: int


def _geometry(mode: ViewMode, config: LayoutConfig) -> _ViewGeometry:
    if mode == ViewMode.DAY:
        return _ViewGeometry(config.day_base_offset_px, config.day_width_percent)
    return _ViewGeometry(config.week_base_offset_px, config.week_width_percent)


def project_block(
    block: LayoutBlock,
    booking: Booking,
    mode: ViewMode,
    config: LayoutConfig = settings.layout,
) -> ProjectedBlock:
    """Pixel geometry and display lines for one block."""
    geometry = _geometry(mode, config)
    shift = block.stack_offset_index * config.overlap_shift_px
    detail = detail_level(block, config)

    if detail == DetailLevel.FULL:
        headline = booking.summary_line()
        services = [
            ServiceLine(name=s.name, technician=s.technician_name or "")
            for s in booking.services
        ]
    else:
        names = " ".join(s.name for s in booking.services if s.name)
        headline = f"{booking.summary_line()} {names}".strip()
        services = []

    return ProjectedBlock(
        booking_id=booking.id,
        top_px=block.start_minute * config.pixels_per_minute,
        height_px=block.duration_minutes * config.pixels_per_minute,
        left_px=geometry.base_offset_px + shift,
        width=f"calc({geometry.width_percent}% - {shift}px)",
        color=bay_color(block.bay_id),
        detail=detail,
        stack_offset_index=block.stack_offset_index,
        headline=headline,
        services=services,
    )


def project_column(
    bookings: Iterable[Booking],
    day: date,
    mode: ViewMode,
    config: LayoutConfig = settings.layout,
) -> DayColumn:
    """Stack and project the bookings of one day column."""
    placed = stack_bookings(bookings_for_day(bookings, day), day)
    return DayColumn(
        day=day,
        height_px=MINUTES_IN_DAY * config.pixels_per_minute,
        blocks=[project_block(block, booking, mode, config) for block, booking in placed],
    )


def project_day(bookings: Iterable[Booking], day: date, config: LayoutConfig = settings.layout) -> DayLayout:
    return DayLayout(column=project_column(list(bookings), day, ViewMode.DAY, config))


def project_week(bookings: Iterable[Booking], reference: date, config: LayoutConfig = settings.layout) -> WeekLayout:
    bookings = list(bookings)
    return WeekLayout(columns=[
        project_column(bookings, day, ViewMode.WEEK, config)
        for day in week_dates(reference)
    ])


def _month_entry(booking: Booking) -> MonthEntry:
    first = booking.services[0]
    names = ", ".join(s.name for s in booking.services)
    return MonthEntry(
        booking_id=booking.id,
        label=booking.customer_label(),
        title=f"{names} - {first.start_time.isoformat()} to {first.end_time.isoformat()}",
        color=bay_color(first.bay_id),
    )


def project_month(bookings: Iterable[Booking], reference: date, config: LayoutConfig = settings.layout) -> MonthLayout:
    """Month grid with up to ``month_visible_bookings`` summaries per cell."""
    bookings = list(bookings)
    limit = config.month_visible_bookings
    weeks: list[list[MonthCell]] = []
    for week in month_grid(reference):
        row: list[MonthCell] = []
        for day in week:
            day_bookings = bookings_for_month_day(bookings, day)
            row.append(MonthCell(
                day=day,
                entries=[_month_entry(b) for b in day_bookings[:limit]],
                more_count=max(0, len(day_bookings) - limit),
            ))
        weeks.append(row)
    return MonthLayout(weeks=weeks)


def time_from_offset(y_px: float, config: LayoutConfig = settings.layout) -> str:
    """Map a vertical click offset back to an "HH:00" start time."""
    hour = math.floor(y_px / config.pixels_per_hour)
    hour = min(max(hour, 0), 23)
    return format_hour(hour)


def click_to_create(reference, y_px: float, config: LayoutConfig = settings.layout) -> Optional[tuple[date, str]]:
    """(date, "HH:00") for a click on an empty part of a day column."""
    day = coerce_reference(reference)
    if day is None:
        return None
    return day, time_from_offset(y_px, config)
