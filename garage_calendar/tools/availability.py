"""
Slot availability for new bookings.

Two sources share the ``fetch_slots(request)`` contract:

- ``LocalSlotSource`` computes candidate slots from the in-memory booking
  collection, the garage's bays, technicians, opening hours and bay breaks.
- ``HttpSlotSource`` asks the garage API for slots. Any transport or
  decoding failure yields an empty list.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import httpx
from pydantic import ValidationError

from garage_calendar.calendar.time_utils import minutes_from_midnight
from garage_calendar.config import SlotConfig, settings
from garage_calendar.schemas.booking_schema import Booking
from garage_calendar.schemas.garage_schema import Bay, BayBreak, BusinessHours, Technician
from garage_calendar.schemas.slot_schema import (
    Slot,
    SlotBay,
    SlotRequest,
    SlotService,
    SlotServiceRef,
    SlotTechnician,
)
from garage_calendar.tools.services import SERVICE_CATALOG, ServiceInfo
from garage_calendar.utils import bay_number

logger = logging.getLogger(__name__)

Interval = tuple[int, int]


class SlotSource:
    """Base class for anything that can produce slots for a request."""

    async def fetch_slots(self, request: SlotRequest) -> list[Slot]:
        raise NotImplementedError


def _intervals_overlap(a: Interval, b: Interval) -> bool:
    return a[0] < b[1] and b[0] < a[1]


def _busy_intervals(bookings: Iterable[Booking], target: date) -> tuple[dict[str, list[Interval]], dict[str, list[Interval]]]:
    """Occupied minutes on ``target`` keyed by bay id and by technician id."""
    by_bay: dict[str, list[Interval]] = {}
    by_tech: dict[str, list[Interval]] = {}
    for booking in bookings:
        for service in booking.services:
            if service.start_time.date() != target:
                continue
            start = minutes_from_midnight(service.start_time)
            if service.end_time.date() == target and service.end_time > service.start_time:
                end = minutes_from_midnight(service.end_time)
            else:
                end = start + max(service.duration, 0)
            if end <= start:
                continue
            if service.bay_id:
                by_bay.setdefault(service.bay_id, []).append((start, end))
            if service.technician_id:
                by_tech.setdefault(service.technician_id, []).append((start, end))
    return by_bay, by_tech


def _is_free(span: Interval, busy: list[Interval]) -> bool:
    return not any(_intervals_overlap(span, other) for other in busy)


class LocalSlotSource(SlotSource):
    """Compute slots against the bookings already on the calendar.

    Requested services are placed back to back on a single bay, starting
    at each step of the opening hours. Each service gets the first
    technician (in roster order) who can perform it and is free for its
    span. A candidate is available when the bay is free of bookings and
    breaks for the whole run and every service found a technician. The
    whole run must finish by closing time.
    """

    def __init__(
        self,
        bookings: Iterable[Booking],
        bays: list[Bay],
        technicians: list[Technician],
        business_hours: Optional[BusinessHours] = None,
        bay_breaks: Iterable[BayBreak] = (),
        catalog: Optional[dict[str, ServiceInfo]] = None,
        config: SlotConfig = settings.slots,
    ) -> None:
        self.bookings = list(bookings)
        self.bays = bays
        self.technicians = technicians
        self.business_hours = business_hours or BusinessHours.uniform(
            config.default_open_time, config.default_close_time
        )
        self.bay_breaks = list(bay_breaks)
        self.catalog = catalog if catalog is not None else SERVICE_CATALOG
        self.config = config

    async def fetch_slots(self, request: SlotRequest) -> list[Slot]:
        return self.compute_slots(request.date, request.service_ids)

    def _breaks_for(self, bay: Bay) -> list[Interval]:
        number = bay_number(bay.id)
        return [b.minutes() for b in self.bay_breaks if b.bay == number]

    def _assign_technicians(
        self,
        services: list[ServiceInfo],
        start_min: int,
        busy_by_tech: dict[str, list[Interval]],
    ) -> Optional[list[tuple[ServiceInfo, Technician, Interval]]]:
        assignments = []
        cursor = start_min
        for service in services:
            span = (cursor, cursor + service["duration"])
            chosen = None
            for tech in self.technicians:
                if not tech.can_perform(service["id"]):
                    continue
                if _is_free(span, busy_by_tech.get(tech.id, [])):
                    chosen = tech
                    break
            if chosen is None:
                return None
            assignments.append((service, chosen, span))
            cursor = span[1]
        return assignments

    def _fallback_assignments(self, services: list[ServiceInfo], start_min: int):
        assignments = []
        cursor = start_min
        for service in services:
            capable = [t for t in self.technicians if t.can_perform(service["id"])]
            if not capable:
                return None
            span = (cursor, cursor + service["duration"])
            assignments.append((service, capable[0], span))
            cursor = span[1]
        return assignments

    def compute_slots(
        self,
        target: date,
        service_ids: list[str],
        include_unavailable: bool = False,
    ) -> list[Slot]:
        """Candidate slots for ``service_ids`` on ``target``, grouped by bay."""
        services = []
        for sid in service_ids:
            info = self.catalog.get(sid)
            if info is None:
                logger.warning("Slot search skipped unknown service id %s", sid)
                return []
            services.append(info)
        if not services:
            return []

        hours = self.business_hours.for_weekday(target.weekday()).open_minutes()
        if hours is None:
            logger.debug("Garage closed on %s", target)
            return []
        open_min, close_min = hours
        total = sum(s["duration"] for s in services)
        if total <= 0:
            return []

        busy_by_bay, busy_by_tech = _busy_intervals(self.bookings, target)
        step = self.config.slot_step_minutes
        slots: list[Slot] = []

        for bay in self.bays:
            bay_busy = busy_by_bay.get(bay.id, []) + self._breaks_for(bay)
            start = open_min
            while start + total <= close_min:
                run = (start, start + total)
                assignments = None
                if _is_free(run, bay_busy):
                    assignments = self._assign_technicians(services, start, busy_by_tech)
                available = assignments is not None
                if not available and include_unavailable:
                    assignments = self._fallback_assignments(services, start)
                if assignments is not None:
                    slots.append(self._build_slot(bay, target, assignments, available))
                start += step

        logger.info(
            "Computed %d slot(s) for %s on %s",
            sum(1 for s in slots if s.is_available), ",".join(service_ids), target,
        )
        return slots

    @staticmethod
    def _build_slot(bay: Bay, target: date, assignments, available: bool) -> Slot:
        midnight = datetime.combine(target, time.min)
        return Slot(
            bay=SlotBay(id=bay.id, name=bay.name or f"Bay {bay_number(bay.id) or bay.id}"),
            services=[
                SlotService(
                    service=SlotServiceRef(id=info["id"], name=info["name"], duration=info["duration"]),
                    technician=SlotTechnician(
                        id=tech.id, first_name=tech.first_name,
                        last_name=tech.last_name, email=tech.email,
                    ),
                    start_time=midnight + timedelta(minutes=span[0]),
                    end_time=midnight + timedelta(minutes=span[1]),
                )
                for info, tech, span in assignments
            ],
            date=target,
            is_available=available,
        )


class HttpSlotSource(SlotSource):
    """Fetch slots from the garage API."""

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

    async def _get(self, path: str, params: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(f"{self.base_url}{path}", params=params, headers=self.headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(f"{self.base_url}{path}", params=params, headers=self.headers)

    async def fetch_slots(self, request: SlotRequest) -> list[Slot]:
        path = f"/api/garages/{request.garage_id}/slots"
        params = {"date": request.date.isoformat(), "serviceIds": ",".join(request.service_ids)}
        try:
            resp = await self._get(path, params)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Slot fetch failed: GET %s -> %s", path, exc)
            return []

        raw_slots = payload.get("slots", []) if isinstance(payload, dict) else payload
        if not isinstance(raw_slots, list):
            logger.error("Slot fetch returned unexpected payload type: %s", type(raw_slots).__name__)
            return []

        slots: list[Slot] = []
        for raw in raw_slots:
            try:
                slots.append(Slot.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Dropping malformed slot: %d validation error(s)", exc.error_count())
        return slots
