"""Tests for the schedule state container."""

from datetime import date

from garage_calendar.schemas.layout_schema import DayLayout, MonthLayout, ViewMode, WeekLayout
from garage_calendar.store import ScheduleStore

from tests.conftest import TUESDAY, bay_id, make_booking, make_service


RAW_BOOKING = {
    "_id": "65f0c0ffee",
    "customer": {"name": "Alex Smith", "phone": "07700900456", "email": "alex@example.com"},
    "vehicle": {"make": "VW", "model": "Golf", "year": 2017, "license": "XY17 ZZZ"},
    "services": [{
        "_id": "s1",
        "bayId": "g1-bay-2",
        "technicianId": {"_id": "t1", "firstName": "Sam", "lastName": "Okafor"},
        "startTime": "2025-03-18T09:00:00.000Z",
        "endTime": "2025-03-18T10:00:00.000Z",
        "name": "Interim Service",
        "duration": 60,
        "price": 149,
    }],
    "totalDuration": 60,
    "totalPrice": 149,
    "bookingDate": "2025-03-18T00:00:00.000Z",
    "status": "confirmed",
}


class TestLoading:
    def test_load_raw_keeps_valid_records(self):
        store = ScheduleStore(selected_date=TUESDAY)
        kept = store.load_raw([RAW_BOOKING, {"_id": "bad", "services": "oops"}])
        assert kept == 1
        booking = store.bookings[0]
        assert booking.services[0].technician_id == "t1"
        assert booking.services[0].technician_name == "Sam Okafor"

    def test_version_bumps_on_change(self, store):
        store.add_booking(make_booking("B1"))
        store.add_booking(make_booking("B2"))
        assert store.version == 2
        assert [b.id for b in store.bookings] == ["B1", "B2"]


class TestLayout:
    def test_layout_type_follows_view_mode(self, store):
        store.set_view_mode(ViewMode.DAY)
        assert isinstance(store.layout(), DayLayout)
        store.set_view_mode("Week")
        assert isinstance(store.layout(), WeekLayout)
        store.set_view_mode(ViewMode.MONTH)
        assert isinstance(store.layout(), MonthLayout)

    def test_bay_filter_applied(self, store):
        store.set_bookings([
            make_booking("B1", [make_service(bay=1)]),
            make_booking("B2", [make_service(bay=2, start="2025-03-18T11:00:00")]),
        ])
        store.set_view_mode(ViewMode.DAY)
        store.set_selected_bay("2")
        assert [b.id for b in store.visible_bookings()] == ["B2"]
        assert [blk.booking_id for blk in store.layout().column.blocks] == ["B2"]

    def test_raw_booking_renders(self):
        store = ScheduleStore(selected_date=TUESDAY, view_mode=ViewMode.DAY)
        store.load_raw([RAW_BOOKING])
        block = store.layout().column.blocks[0]
        assert block.top_px == 540
        assert block.height_px == 60
        assert block.headline == "ALEX SMITH VW Golf (2017)"


class TestNavigation:
    def test_day_steps(self, store):
        store.set_view_mode(ViewMode.DAY)
        assert store.navigate(1) == date(2025, 3, 19)

    def test_week_steps(self, store):
        assert store.navigate(-1) == date(2025, 3, 11)

    def test_month_steps_clamp_day(self):
        store = ScheduleStore(selected_date=date(2025, 1, 31), view_mode=ViewMode.MONTH)
        assert store.navigate(1) == date(2025, 2, 28)
        assert store.navigate(11) == date(2026, 1, 28)

    def test_month_steps_backwards_over_year(self):
        store = ScheduleStore(selected_date=date(2025, 1, 15), view_mode=ViewMode.MONTH)
        assert store.navigate(-1) == date(2024, 12, 15)


class TestBayAndDate:
    def test_bookings_for_bay_and_date(self, store):
        store.set_bookings([
            make_booking("B1", [make_service(bay=1)]),
            make_booking("B2", [make_service(bay=2)]),
            make_booking("B3", [make_service(bay=1, start="2025-03-19T09:00:00")]),
        ])
        assert [b.id for b in store.bookings_for_bay_and_date(bay_id(1), TUESDAY)] == ["B1"]
