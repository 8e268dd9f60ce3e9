"""
Booking submission.

``HttpBookingSubmitter`` posts the create-booking request to the garage
API. ``LocalBookingSubmitter`` adds the booking straight into a
``ScheduleStore`` for offline use and demos.
"""

import logging
import uuid
from datetime import datetime, time
from typing import Optional

import httpx

from garage_calendar.config import settings
from garage_calendar.schemas.booking_schema import (
    Booking,
    BookingCreateRequest,
    BookingCreateResponse,
    Customer,
    ServiceSpan,
    Vehicle,
)
from garage_calendar.store import ScheduleStore
from garage_calendar.tools.services import SERVICE_CATALOG, ServiceInfo

logger = logging.getLogger(__name__)


class BookingSubmissionError(Exception):
    """Raised when a booking could not be created."""


class BookingSubmitter:
    """Base class for anything that can create a booking."""

    async def submit(self, request: BookingCreateRequest) -> BookingCreateResponse:
        raise NotImplementedError


class HttpBookingSubmitter(BookingSubmitter):
    """POST the booking to ``{base_url}/api/bookings``."""

    def __init__(
        self,
        base_url: str = settings.slots.api_base_url,
        timeout: float = settings.slots.api_timeout_sec,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self.headers = headers or {}

    async def _post(self, path: str, body: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(f"{self.base_url}{path}", json=body, headers=self.headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(f"{self.base_url}{path}", json=body, headers=self.headers)

    async def submit(self, request: BookingCreateRequest) -> BookingCreateResponse:
        try:
            resp = await self._post("/api/bookings", request.to_api())
        except httpx.HTTPError as exc:
            raise BookingSubmissionError(f"Could not reach the booking service: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.status_code >= 400:
            message = data.get("error") or data.get("message") or f"HTTP {resp.status_code}"
            logger.error("Booking creation rejected: %s", message)
            raise BookingSubmissionError(message)

        booking = data.get("booking") if isinstance(data.get("booking"), dict) else data
        booking_id = booking.get("bookingId") or booking.get("_id")
        logger.info("Booking created: %s on %s", booking_id, request.date)
        return BookingCreateResponse(
            success=True,
            booking_id=booking_id,
            message=data.get("message", "Booking created successfully"),
        )


class LocalBookingSubmitter(BookingSubmitter):
    """Create bookings directly in a schedule store."""

    def __init__(self, store: ScheduleStore, catalog: Optional[dict[str, ServiceInfo]] = None) -> None:
        self.store = store
        self.catalog = catalog if catalog is not None else SERVICE_CATALOG

    async def submit(self, request: BookingCreateRequest) -> BookingCreateResponse:
        if not request.services:
            raise BookingSubmissionError("Cannot create booking - no services selected.")

        ref = f"BK-{uuid.uuid4().hex[:6].upper()}"
        spans = []
        for svc in request.services:
            info = self.catalog.get(svc.service_id)
            start = datetime.fromisoformat(svc.start_time)
            end = datetime.fromisoformat(svc.end_time)
            spans.append(ServiceSpan(
                bay_id=svc.bay_id,
                technician_id=svc.technician_id,
                start_time=start,
                end_time=end,
                name=info["name"] if info else svc.service_id,
                duration=int((end - start).total_seconds() // 60),
                price=info["price"] if info else 0.0,
            ))

        booking_day = datetime.fromisoformat(request.date).date()
        booking = Booking(
            id=ref,
            customer=Customer(
                name=f"{request.customer.first_name} {request.customer.last_name}".strip(),
                phone=request.customer.phone,
                email=request.customer.email,
            ),
            vehicle=Vehicle(
                make=request.vehicle.make,
                model=request.vehicle.model,
                year=request.vehicle.year,
                license=request.vehicle.license_plate,
            ),
            services=spans,
            total_duration=sum(s.duration for s in spans),
            total_price=sum(s.price for s in spans),
            booking_date=datetime.combine(booking_day, time.min),
            status="confirmed",
            notes=request.notes,
        )
        self.store.add_booking(booking)
        logger.info("Booking created: %s for %s on %s", ref, booking.customer.name, request.date)
        return BookingCreateResponse(success=True, booking_id=ref, message=f"Booking {ref} confirmed.")
