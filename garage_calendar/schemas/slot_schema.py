"""Slot availability models offered during booking creation."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class SlotBay(BaseModel):
    id: str
    name: str = ""


class SlotServiceRef(BaseModel):
    id: str
    name: str = ""
    duration: int = 0


class SlotTechnician(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""


class SlotService(BaseModel):
    """One requested service placed on a technician and time range."""

    model_config = ConfigDict(populate_by_name=True)

    service: SlotServiceRef
    technician: SlotTechnician
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")


class Slot(BaseModel):
    """A candidate bay/technician/time combination for a new booking."""

    model_config = ConfigDict(populate_by_name=True)

    bay: SlotBay
    services: list[SlotService] = Field(default_factory=list)
    date: date
    is_available: bool = Field(default=True, alias="isAvailable")

    @property
    def key(self) -> str:
        """Stable identifier used by the form to remember the chosen slot."""
        if not self.services:
            return f"{self.bay.id}|"
        first, last = self.services[0], self.services[-1]
        return f"{self.bay.id}|{first.start_time.isoformat()}-{last.end_time.isoformat()}"

    @property
    def start_time(self) -> datetime:
        return self.services[0].start_time

    @property
    def end_time(self) -> datetime:
        return self.services[-1].end_time


class SlotRequest(BaseModel):
    """Inputs for a slot search."""
    garage_id: str
    date: date
    service_ids: list[str]
