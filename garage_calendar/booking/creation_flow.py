"""
New-booking flow: services and date in, slot chosen, booking submitted.

Drives the state machine, the form and the slot fetcher together. Slots
are fetched only once both services and a date are set, and refetched
whenever either changes. A changed selection always discards the chosen
slot. A failed submission keeps every field so the user can resubmit.
"""

import logging
import uuid
from datetime import date
from typing import Awaitable, Callable, Optional, Union

from garage_calendar.booking.booking_form import BookingForm, SlotSelectionError
from garage_calendar.booking.slot_fetcher import SlotFetcher
from garage_calendar.booking.state_machine import (
    BookingState,
    BookingStateMachine,
    BookingTrigger,
    InvalidTransitionError,
)
from garage_calendar.logging_context import bind_session, session_scope
from garage_calendar.schemas.booking_schema import BookingCreateResponse
from garage_calendar.schemas.slot_schema import Slot, SlotRequest
from garage_calendar.tools.availability import SlotSource
from garage_calendar.tools.booking import BookingSubmissionError, BookingSubmitter

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Union[None, Awaitable[None]]]

_SLOT_STATES = (BookingState.DATE_SELECTED, BookingState.SLOTS_LOADED, BookingState.SLOT_SELECTED)
_EDITABLE_STATES = (BookingState.IDLE, BookingState.SERVICE_SELECTED) + _SLOT_STATES


class BookingCreationFlow:
    """One "new booking" dialog."""

    def __init__(
        self,
        garage_id: str,
        slot_source: SlotSource,
        submitter: BookingSubmitter,
        on_created: Optional[RefreshCallback] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.garage_id = garage_id
        self.sm = BookingStateMachine()
        self.form = BookingForm()
        self.fetcher = SlotFetcher(slot_source)
        self.submitter = submitter
        self.on_created = on_created
        self.error_message: Optional[str] = None
        self.last_response: Optional[BookingCreateResponse] = None
        self.session_id = session_id or f"NB-{uuid.uuid4().hex[:8]}"
        with session_scope(self.session_id):
            logger.debug("New booking dialog for garage %s", garage_id)

    @property
    def state(self) -> BookingState:
        return self.sm.current_state

    @property
    def slots(self) -> list[Slot]:
        return self.fetcher.slots

    @property
    def selectable_slots(self) -> list[Slot]:
        return [s for s in self.fetcher.slots if s.is_available]

    # ------------------------------------------------------------------ #
    # Inputs
    # ------------------------------------------------------------------ #

    @bind_session
    async def select_services(self, service_ids: list[str]) -> list[Slot]:
        """Choose the services to book; refetches slots when a date is set."""
        self._check_inputs_editable()
        changed = self.form.set_services(service_ids)
        if not changed:
            return self.slots
        if not self.form.service_ids:
            logger.info("Service selection cleared")
            self.fetcher.invalidate()
            return self.slots

        if self.state == BookingState.IDLE:
            self.sm.transition(BookingTrigger.SERVICES_CHOSEN)
            if self.form.date is not None:
                self.sm.transition(BookingTrigger.DATE_CHOSEN)
        elif self.state == BookingState.SERVICE_SELECTED:
            self.sm.transition(BookingTrigger.SERVICES_CHOSEN)
        else:
            self.sm.transition(BookingTrigger.INPUTS_CHANGED)
        return await self._refresh_slots()

    @bind_session
    async def select_date(self, value: date) -> list[Slot]:
        """Choose the booking date; refetches slots when services are set."""
        self._check_inputs_editable()
        changed = self.form.set_date(value)
        if not changed:
            return self.slots

        if self.state in (BookingState.IDLE, BookingState.SERVICE_SELECTED):
            self.sm.transition(BookingTrigger.DATE_CHOSEN)
        else:
            self.sm.transition(BookingTrigger.INPUTS_CHANGED)
        return await self._refresh_slots()

    def _check_inputs_editable(self) -> None:
        # Once submitted, the form must keep matching the payload that was sent.
        if self.state not in _EDITABLE_STATES:
            raise InvalidTransitionError(
                f"Services and date cannot change in state '{self.state.value}'"
            )

    def set_field(self, name: str, value: str) -> tuple[bool, str]:
        return self.form.set_field(name, value)

    async def _refresh_slots(self) -> list[Slot]:
        if not self.form.service_ids or self.form.date is None:
            return self.slots
        if self.state not in _SLOT_STATES:
            return self.slots

        request = SlotRequest(
            garage_id=self.garage_id,
            date=self.form.date,
            service_ids=list(self.form.service_ids),
        )
        slots = await self.fetcher.fetch(request)
        if slots is None:
            # A newer request superseded this one.
            return self.slots

        self.error_message = self.fetcher.last_error
        if self.state == BookingState.DATE_SELECTED or self.state == BookingState.SLOTS_LOADED:
            self.sm.transition(BookingTrigger.SLOTS_RECEIVED)
        logger.info("Loaded %d slot(s), %d selectable", len(slots), len(self.selectable_slots))
        return slots

    # ------------------------------------------------------------------ #
    # Slot choice
    # ------------------------------------------------------------------ #

    @bind_session
    def select_slot(self, key: str) -> Slot:
        """Pick one of the loaded slots by key."""
        if self.state not in (BookingState.SLOTS_LOADED, BookingState.SLOT_SELECTED):
            raise SlotSelectionError(f"Slots are not loaded (state: {self.state.value})")
        slot = self.fetcher.find(key)
        if slot is None:
            raise SlotSelectionError(f"Unknown slot: {key}")
        self.form.select_slot(slot)
        self.sm.transition(BookingTrigger.SLOT_CHOSEN)
        logger.info("Slot selected: %s", key)
        return slot

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def can_submit(self) -> bool:
        return self.state == BookingState.SLOT_SELECTED and self.form.is_valid()

    @bind_session
    async def submit(self) -> bool:
        """Submit the booking. Returns True on success."""
        if not self.can_submit():
            missing = [d.display_name for d in self.form.get_missing_fields()]
            if self.form.selected_slot is None:
                missing.append("time slot")
            self.error_message = f"Please complete: {', '.join(missing)}"
            return False

        payload = self.form.to_payload()
        self.sm.transition(BookingTrigger.SUBMIT)
        try:
            response = await self.submitter.submit(payload)
        except BookingSubmissionError as exc:
            self.sm.transition(BookingTrigger.SUBMIT_FAILED)
            self.error_message = str(exc) or "An error occurred. Please try again later."
            logger.warning("Booking submission failed: %s", self.error_message)
            self.sm.transition(BookingTrigger.RETRY)
            return False

        self.sm.transition(BookingTrigger.SUBMIT_SUCCEEDED)
        self.last_response = response
        self.error_message = None
        logger.info("Booking %s created", response.booking_id)

        if self.on_created is not None:
            result = self.on_created()
            if result is not None:
                await result
        return True

    @bind_session
    def reset(self) -> None:
        """Start a fresh booking after a successful one."""
        self.sm.transition(BookingTrigger.RESET)
        self.form.reset()
        self.fetcher.invalidate()
        self.error_message = None
