"""Calendar window and layout output models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ViewMode(str, Enum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"


class DetailLevel(str, Enum):
    FULL = "full"
    CONDENSED = "condensed"


class ViewWindow(BaseModel):
    """Date range covered by one calendar view."""
    mode: ViewMode
    start: datetime
    end: datetime


class LayoutBlock(BaseModel):
    """Abstract placement of one booking inside a day column."""
    booking_id: str
    start_minute: int
    end_minute: int
    bay_id: Optional[str] = None
    stack_offset_index: int = 0

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute


class ServiceLine(BaseModel):
    name: str
    technician: str = ""


class ProjectedBlock(BaseModel):
    """Pixel geometry and display content for one booking block."""
    booking_id: str
    top_px: float
    height_px: float
    left_px: int
    width: str
    color: str
    detail: DetailLevel
    stack_offset_index: int
    headline: str
    services: list[ServiceLine] = Field(default_factory=list)


class DayColumn(BaseModel):
    day: date
    height_px: float
    blocks: list[ProjectedBlock] = Field(default_factory=list)


class DayLayout(BaseModel):
    column: DayColumn


class WeekLayout(BaseModel):
    columns: list[DayColumn]


class MonthEntry(BaseModel):
    booking_id: str
    label: str
    title: str
    color: str


class MonthCell(BaseModel):
    day: Optional[date] = None
    entries: list[MonthEntry] = Field(default_factory=list)
    more_count: int = 0

    @property
    def more_label(self) -> Optional[str]:
        if self.more_count <= 0:
            return None
        return f"+{self.more_count} more"


class MonthLayout(BaseModel):
    weeks: list[list[MonthCell]]
