from garage_calendar.calendar.overlap import compute_layout_blocks
from garage_calendar.calendar.projector import (
    bay_color,
    click_to_create,
    project_day,
    project_month,
    project_week,
    time_from_offset,
)
from garage_calendar.calendar.time_utils import minutes_from_midnight, month_grid, week_dates
from garage_calendar.calendar.window_filter import ALL_BAYS, filter_bookings

__all__ = [
    "ALL_BAYS",
    "filter_bookings",
    "compute_layout_blocks",
    "minutes_from_midnight",
    "week_dates",
    "month_grid",
    "bay_color",
    "project_day",
    "project_week",
    "project_month",
    "time_from_offset",
    "click_to_create",
]
