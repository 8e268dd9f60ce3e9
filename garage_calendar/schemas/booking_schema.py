"""Booking data models as delivered by the garage API."""

import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


class Customer(BaseModel):
    """Customer contact details attached to a booking."""
    name: str = ""
    phone: str = ""
    email: str = ""


class Vehicle(BaseModel):
    """Vehicle being serviced."""
    make: str = ""
    model: str = ""
    year: Optional[int] = None
    license: str = ""
    vin: str = ""

    def describe(self) -> str:
        text = f"{self.make} {self.model}".strip()
        if self.year:
            text += f" ({self.year})"
        return text


class ServiceSpan(BaseModel):
    """One service inside a booking, with its own bay, technician and time range."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    bay_id: Optional[str] = Field(default=None, alias="bayId")
    technician_id: Optional[str] = Field(default=None, alias="technicianId")
    technician_name: Optional[str] = Field(default=None, alias="technicianName")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    name: str = ""
    duration: int = 0
    price: float = 0.0
    status: str = "pending"

    @model_validator(mode="before")
    @classmethod
    def _unpack_technician(cls, data: Any) -> Any:
        """Accept an embedded technician object in place of a plain id."""
        if not isinstance(data, dict):
            return data
        tech = data.get("technicianId")
        if isinstance(tech, dict):
            data = dict(data)
            data["technicianId"] = tech.get("_id") or tech.get("id")
            full_name = f"{tech.get('firstName', '')} {tech.get('lastName', '')}".strip()
            data.setdefault("technicianName", full_name or None)
        bay = data.get("bayId")
        if bay is not None and not isinstance(bay, str):
            data = dict(data)
            data["bayId"] = str(bay)
        return data


class Booking(BaseModel):
    """A scheduled appointment with one or more services."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    customer: Customer = Field(default_factory=Customer)
    vehicle: Vehicle = Field(default_factory=Vehicle)
    services: list[ServiceSpan] = Field(default_factory=list)
    total_duration: Optional[int] = Field(default=None, alias="totalDuration")
    total_price: float = Field(default=0.0, alias="totalPrice")
    booking_date: Optional[datetime] = Field(default=None, alias="bookingDate")
    status: str = "pending"
    notes: str = ""

    def customer_label(self) -> str:
        name = self.customer.name.strip() if self.customer.name else ""
        return name.upper() if name else "UNKNOWN CUSTOMER"

    def summary_line(self) -> str:
        """Customer and vehicle on one line, as shown at the top of a block."""
        vehicle = self.vehicle.describe()
        return f"{self.customer_label()} {vehicle}".strip()


def parse_bookings(raw_bookings: Iterable[dict]) -> list[Booking]:
    """Parse raw API records into bookings, dropping malformed ones.

    Records that fail validation (missing services list shape, non-numeric
    durations, bad timestamps) are logged and skipped rather than raised,
    so one bad row never takes down the whole schedule.
    """
    bookings: list[Booking] = []
    for raw in raw_bookings:
        try:
            bookings.append(Booking.model_validate(raw))
        except ValidationError as exc:
            ref = raw.get("_id") if isinstance(raw, dict) else None
            logger.warning(
                "Skipping malformed booking %s: %d validation error(s)",
                ref, exc.error_count(),
            )
    return bookings


class CustomerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    phone: str = ""


class VehiclePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    make: str
    model: str
    year: int
    license_plate: str = Field(alias="licensePlate")
    vin: str = ""


class ServicePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_id: str = Field(alias="serviceId")
    technician_id: str = Field(alias="technicianId")
    bay_id: str = Field(alias="bayId")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    status: str = "pending"
    notes: str = ""


class BookingCreateRequest(BaseModel):
    """Create-booking request body sent to the garage API."""

    date: str
    customer: CustomerPayload
    vehicle: VehiclePayload
    services: list[ServicePayload]
    notes: str = ""

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True)


class BookingCreateResponse(BaseModel):
    """Outcome of a create-booking submission."""
    success: bool
    booking_id: Optional[str] = None
    message: str = ""
