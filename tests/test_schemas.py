"""Tests for booking, garage and slot models."""

from datetime import date

import pytest
from pydantic import ValidationError

from garage_calendar.schemas.booking_schema import Booking, ServiceSpan, parse_bookings
from garage_calendar.schemas.garage_schema import BayBreak, BusinessHours, DayHours, Garage
from garage_calendar.schemas.slot_schema import Slot
from garage_calendar.tools.services import match_service, total_duration

from tests.conftest import make_slot


class TestServiceSpan:
    def test_numeric_bay_id_stringified(self):
        span = ServiceSpan.model_validate({
            "bayId": 3, "startTime": "2025-03-18T09:00:00", "endTime": "2025-03-18T09:30:00",
        })
        assert span.bay_id == "3"

    def test_plain_technician_id(self):
        span = ServiceSpan.model_validate({
            "technicianId": "t1", "startTime": "2025-03-18T09:00:00", "endTime": "2025-03-18T09:30:00",
        })
        assert span.technician_id == "t1"
        assert span.technician_name is None


class TestParseBookings:
    def test_non_numeric_duration_dropped(self):
        raw = {"_id": "B1", "totalDuration": "long", "services": []}
        assert parse_bookings([raw]) == []

    def test_missing_services_defaults_empty(self):
        bookings = parse_bookings([{"_id": "B1"}])
        assert bookings[0].services == []

    def test_customer_label_fallback(self):
        assert Booking(id="B1").customer_label() == "UNKNOWN CUSTOMER"


class TestGarage:
    def test_from_api_json(self):
        garage = Garage.model_validate({
            "_id": "g1",
            "name": "Main Street",
            "bays": [{"_id": "g1-bay-1", "name": "Bay 1"}],
            "technicians": [{"_id": "t1", "firstName": "Sam", "lastName": "Okafor"}],
            "businessHours": {"days": {"monday": {"isOpen": True, "openTime": "09:00", "closeTime": "17:00"}}},
            "bayBreaks": [{"bay": 1, "startTime": "12:00", "endTime": "12:30", "description": "Lunch"}],
        })
        assert garage.technicians[0].full_name == "Sam Okafor"
        assert garage.business_hours.for_weekday(0).open_minutes() == (540, 1020)
        assert not garage.business_hours.for_weekday(1).is_open
        assert garage.bay_breaks[0].minutes() == (720, 750)

    def test_bad_hours_rejected(self):
        with pytest.raises(ValidationError):
            DayHours(open_time="nine", close_time="17:00")

    def test_inverted_hours_treated_as_closed(self):
        assert DayHours(open_time="18:00", close_time="08:00").open_minutes() is None

    def test_uniform_hours(self):
        hours = BusinessHours.uniform("08:00", "18:00", closed=("saturday", "sunday"))
        assert hours.for_weekday(4).open_minutes() == (480, 1080)
        assert hours.for_weekday(5).open_minutes() is None

    def test_break_fields(self):
        brk = BayBreak(bay=2, start_time="10:00", end_time="10:15")
        assert brk.minutes() == (600, 615)


class TestSlot:
    def test_key_and_times(self):
        slot = make_slot(bay=2, start="2025-03-18T10:00:00", minutes=45)
        assert slot.key == "g1-bay-2|2025-03-18T10:00:00-2025-03-18T10:45:00"
        assert slot.start_time.hour == 10
        assert slot.end_time.minute == 45

    def test_defaults_to_available(self):
        slot = Slot.model_validate({"bay": {"id": "b1"}, "date": "2025-03-18"})
        assert slot.is_available
        assert slot.date == date(2025, 3, 18)


class TestServiceCatalog:
    def test_total_duration_skips_unknown(self):
        assert total_duration(["oil-change", "mot", "teleport"]) == 75

    @pytest.mark.parametrize("query,expected", [
        ("oil-change", "oil-change"),
        ("I need new brakes", "brake-pads"),
        ("mot test please", "mot"),
        ("tyre fitting", "tyre-fitting"),
        ("", None),
        ("paint job", None),
    ])
    def test_match_service(self, query, expected):
        assert match_service(query) == expected
