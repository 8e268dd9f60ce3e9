"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from garage_calendar.booking.booking_form import BookingForm
from garage_calendar.booking.state_machine import BookingStateMachine
from garage_calendar.schemas.booking_schema import Booking, Customer, ServiceSpan, Vehicle
from garage_calendar.schemas.garage_schema import Bay, BusinessHours, Technician
from garage_calendar.schemas.slot_schema import (
    Slot,
    SlotBay,
    SlotService,
    SlotServiceRef,
    SlotTechnician,
)
from garage_calendar.store import ScheduleStore

GARAGE_ID = "g1"

# Tuesday; its Sunday-first week runs 2025-03-16 .. 2025-03-22.
TUESDAY = date(2025, 3, 18)


@pytest.fixture
def state_machine():
    return BookingStateMachine()


@pytest.fixture
def booking_form():
    return BookingForm()


@pytest.fixture
def bays():
    return [Bay(id=f"{GARAGE_ID}-bay-1", name="Bay 1"), Bay(id=f"{GARAGE_ID}-bay-2", name="Bay 2")]


@pytest.fixture
def technicians():
    return [
        Technician(id="t1", first_name="Sam", last_name="Okafor", email="sam@garage.test"),
        Technician(id="t2", first_name="Priya", last_name="Shah", email="priya@garage.test"),
    ]


@pytest.fixture
def business_hours():
    return BusinessHours.uniform("08:00", "18:00")


@pytest.fixture
def store():
    return ScheduleStore(selected_date=TUESDAY)


def bay_id(number: int) -> str:
    return f"{GARAGE_ID}-bay-{number}"


def make_service(
    bay: int = 1,
    start: str = "2025-03-18T09:00:00",
    minutes: int = 30,
    name: str = "Oil & Filter Change",
    technician_id: Optional[str] = "t1",
    technician_name: Optional[str] = "Sam Okafor",
) -> ServiceSpan:
    """Helper to create a ServiceSpan starting at ``start`` for ``minutes``."""
    start_time = datetime.fromisoformat(start)
    return ServiceSpan(
        bay_id=bay_id(bay),
        technician_id=technician_id,
        technician_name=technician_name,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=minutes),
        name=name,
        duration=minutes,
        price=50.0,
    )


def make_booking(
    booking_id: str,
    services: Optional[list[ServiceSpan]] = None,
    total_duration: Optional[int] = None,
    booking_date: Optional[datetime] = None,
    customer: str = "Jane Doe",
) -> Booking:
    """Helper to create a Booking with sensible defaults.

    ``total_duration`` defaults to the summed service durations and
    ``booking_date`` to midnight of the first service's day.
    """
    if services is None:
        services = [make_service()]
    if total_duration is None:
        total_duration = sum(s.duration for s in services)
    if booking_date is None and services:
        booking_date = datetime.combine(services[0].start_time.date(), datetime.min.time())
    return Booking(
        id=booking_id,
        customer=Customer(name=customer, phone="07700900123", email="jane@example.com"),
        vehicle=Vehicle(make="Ford", model="Focus", year=2019, license="AB12 CDE"),
        services=services,
        total_duration=total_duration,
        booking_date=booking_date,
    )


def make_slot(
    bay: int = 1,
    start: str = "2025-03-18T10:00:00",
    minutes: int = 30,
    service_id: str = "oil-change",
    available: bool = True,
) -> Slot:
    """Helper to create a single-service Slot."""
    start_time = datetime.fromisoformat(start)
    return Slot(
        bay=SlotBay(id=bay_id(bay), name=f"Bay {bay}"),
        services=[
            SlotService(
                service=SlotServiceRef(id=service_id, name=service_id, duration=minutes),
                technician=SlotTechnician(id="t1", first_name="Sam", last_name="Okafor"),
                start_time=start_time,
                end_time=start_time + timedelta(minutes=minutes),
            )
        ],
        date=start_time.date(),
        is_available=available,
    )


def fill_customer_and_vehicle(form: BookingForm) -> None:
    """Fill every required customer and vehicle field with valid values."""
    form.set_field("customer_name", "jane doe")
    form.set_field("customer_email", "Jane@Example.com")
    form.set_field("customer_phone", "07700 900 123")
    form.set_field("vehicle_make", "Ford")
    form.set_field("vehicle_model", "Focus")
    form.set_field("vehicle_year", "2019")
    form.set_field("vehicle_registration", "ab12 cde")
