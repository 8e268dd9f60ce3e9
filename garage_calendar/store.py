"""
Schedule state container.

One ``ScheduleStore`` instance is owned by the application shell and
passed to whatever needs the booking collection or the current calendar
selection. Layouts are recomputed from it on every call.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Union

from garage_calendar.calendar.projector import project_day, project_month, project_week
from garage_calendar.calendar.window_filter import ALL_BAYS, BayFilter, filter_bookings
from garage_calendar.schemas.booking_schema import Booking, parse_bookings
from garage_calendar.schemas.layout_schema import DayLayout, MonthLayout, ViewMode, WeekLayout

logger = logging.getLogger(__name__)

Layout = Union[DayLayout, WeekLayout, MonthLayout]


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


@dataclass
class ScheduleStore:
    """Bookings plus the current date, view mode and bay filter."""

    bookings: list[Booking] = field(default_factory=list)
    selected_date: date = field(default_factory=date.today)
    view_mode: ViewMode = ViewMode.WEEK
    selected_bay: BayFilter = ALL_BAYS
    version: int = 0

    def set_bookings(self, bookings: Iterable[Booking]) -> None:
        self.bookings = list(bookings)
        self.version += 1
        logger.debug("Schedule now holds %d booking(s) (v%d)", len(self.bookings), self.version)

    def load_raw(self, raw_bookings: Iterable[dict]) -> int:
        """Replace the bookings from raw API records. Returns how many were kept."""
        self.set_bookings(parse_bookings(raw_bookings))
        return len(self.bookings)

    def add_booking(self, booking: Booking) -> None:
        self.set_bookings([*self.bookings, booking])

    def set_view_mode(self, mode: Union[ViewMode, str]) -> None:
        self.view_mode = ViewMode(mode)

    def set_selected_bay(self, bay: BayFilter) -> None:
        self.selected_bay = bay

    def set_selected_date(self, value: date) -> None:
        self.selected_date = value

    def navigate(self, steps: int) -> date:
        """Move the selected date by ``steps`` views (days, weeks or months)."""
        if self.view_mode == ViewMode.DAY:
            self.selected_date += timedelta(days=steps)
        elif self.view_mode == ViewMode.WEEK:
            self.selected_date += timedelta(weeks=steps)
        else:
            self.selected_date = _shift_month(self.selected_date, steps)
        return self.selected_date

    def visible_bookings(self) -> list[Booking]:
        return filter_bookings(self.bookings, self.view_mode, self.selected_date, self.selected_bay)

    def layout(self) -> Layout:
        """Layout for the current view."""
        visible = self.visible_bookings()
        if self.view_mode == ViewMode.DAY:
            return project_day(visible, self.selected_date)
        if self.view_mode == ViewMode.WEEK:
            return project_week(visible, self.selected_date)
        return project_month(visible, self.selected_date)

    def bookings_for_bay_and_date(self, bay_id: str, day: date) -> list[Booking]:
        """Bookings with a service in ``bay_id`` starting on ``day``."""
        return [
            b for b in self.bookings
            if any(s.bay_id == bay_id and s.start_time.date() == day for s in b.services)
        ]
