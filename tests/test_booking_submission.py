"""Tests for booking submitters."""

import json

import httpx
import pytest

from garage_calendar.booking.booking_form import BookingForm
from garage_calendar.tools.booking import (
    BookingSubmissionError,
    HttpBookingSubmitter,
    LocalBookingSubmitter,
)

from tests.conftest import TUESDAY, fill_customer_and_vehicle, make_slot


@pytest.fixture
def create_request():
    form = BookingForm()
    fill_customer_and_vehicle(form)
    form.set_services(["oil-change"])
    form.set_date(TUESDAY)
    form.select_slot(make_slot())
    return form.to_payload()


def _submitter(handler) -> HttpBookingSubmitter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpBookingSubmitter(base_url="http://garage.test/", client=client)


class TestHttpSubmitter:
    @pytest.mark.asyncio
    async def test_posts_camel_case_body(self, create_request):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"booking": {"_id": "abc123"}, "message": "Booking created"})

        response = await _submitter(handler).submit(create_request)
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/bookings"
        assert seen["body"]["customer"]["firstName"] == "Jane"
        assert seen["body"]["vehicle"]["licensePlate"] == "AB12 CDE"
        assert seen["body"]["services"][0]["serviceId"] == "oil-change"
        assert response.success
        assert response.booking_id == "abc123"
        assert response.message == "Booking created"

    @pytest.mark.asyncio
    async def test_flat_response_with_booking_id(self, create_request):
        submitter = _submitter(lambda r: httpx.Response(200, json={"bookingId": "BK-1"}))
        response = await submitter.submit(create_request)
        assert response.booking_id == "BK-1"

    @pytest.mark.asyncio
    async def test_rejection_raises_with_server_message(self, create_request):
        submitter = _submitter(lambda r: httpx.Response(409, json={"error": "Slot already taken"}))
        with pytest.raises(BookingSubmissionError, match="Slot already taken"):
            await submitter.submit(create_request)

    @pytest.mark.asyncio
    async def test_rejection_without_body(self, create_request):
        submitter = _submitter(lambda r: httpx.Response(500, text="Internal Server Error"))
        with pytest.raises(BookingSubmissionError, match="HTTP 500"):
            await submitter.submit(create_request)

    @pytest.mark.asyncio
    async def test_transport_error(self, create_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(BookingSubmissionError, match="Could not reach"):
            await _submitter(handler).submit(create_request)


class TestLocalSubmitter:
    @pytest.mark.asyncio
    async def test_adds_booking_to_store(self, store, create_request):
        version = store.version
        response = await LocalBookingSubmitter(store).submit(create_request)
        assert response.booking_id.startswith("BK-")
        assert store.version == version + 1
        booking = store.bookings[0]
        assert booking.total_duration == 30
        assert booking.services[0].name == "Oil & Filter Change"
        assert booking.booking_date.date() == TUESDAY
        assert booking.vehicle.license == "AB12 CDE"

    @pytest.mark.asyncio
    async def test_created_booking_shows_in_calendar(self, store, create_request):
        await LocalBookingSubmitter(store).submit(create_request)
        store.set_view_mode("Day")
        store.set_selected_date(TUESDAY)
        assert len(store.layout().column.blocks) == 1

    @pytest.mark.asyncio
    async def test_no_services_rejected(self, store, create_request):
        empty = create_request.model_copy(update={"services": []})
        with pytest.raises(BookingSubmissionError):
            await LocalBookingSubmitter(store).submit(empty)
