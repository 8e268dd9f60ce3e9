"""Garage resources: bays, technicians, opening hours and bay breaks."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from garage_calendar.utils import time_str_to_minutes

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class Bay(BaseModel):
    """A physical service bay."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str = ""


class Technician(BaseModel):
    """A technician who can be assigned to services."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    service_ids: Optional[list[str]] = Field(default=None, alias="serviceIds")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def can_perform(self, service_id: str) -> bool:
        """Technicians without a skill list can perform any service."""
        return self.service_ids is None or service_id in self.service_ids


class DayHours(BaseModel):
    """Opening hours for one weekday."""

    model_config = ConfigDict(populate_by_name=True)

    is_open: bool = Field(default=True, alias="isOpen")
    open_time: str = Field(default="08:00", alias="openTime")
    close_time: str = Field(default="18:00", alias="closeTime")

    @field_validator("open_time", "close_time")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        time_str_to_minutes(value)
        return value

    def open_minutes(self) -> Optional[tuple[int, int]]:
        """(open, close) in minutes from midnight, or None when closed."""
        if not self.is_open:
            return None
        start = time_str_to_minutes(self.open_time)
        end = time_str_to_minutes(self.close_time)
        if end <= start:
            return None
        return start, end


class BusinessHours(BaseModel):
    """Weekly opening hours keyed by lowercase weekday name."""

    days: dict[str, DayHours] = Field(default_factory=dict)

    @classmethod
    def uniform(cls, open_time: str, close_time: str, closed: tuple[str, ...] = ("sunday",)) -> "BusinessHours":
        return cls(days={
            name: DayHours(is_open=name not in closed, open_time=open_time, close_time=close_time)
            for name in WEEKDAY_NAMES
        })

    def for_weekday(self, weekday: int) -> DayHours:
        """Hours for a Python weekday index (0 = Monday). Missing days are closed."""
        return self.days.get(WEEKDAY_NAMES[weekday], DayHours(is_open=False))


class BayBreak(BaseModel):
    """A recurring daily break during which a bay takes no work."""

    model_config = ConfigDict(populate_by_name=True)

    bay: int
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    description: str = ""

    def minutes(self) -> tuple[int, int]:
        return time_str_to_minutes(self.start_time), time_str_to_minutes(self.end_time)


class Garage(BaseModel):
    """A garage with everything the slot search needs."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str = ""
    bays: list[Bay] = Field(default_factory=list)
    technicians: list[Technician] = Field(default_factory=list)
    business_hours: Optional[BusinessHours] = Field(default=None, alias="businessHours")
    bay_breaks: list[BayBreak] = Field(default_factory=list, alias="bayBreaks")
