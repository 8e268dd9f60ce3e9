from garage_calendar.booking.booking_form import BookingForm, FieldStatus, SlotSelectionError
from garage_calendar.booking.creation_flow import BookingCreationFlow
from garage_calendar.booking.slot_fetcher import SlotFetcher
from garage_calendar.booking.state_machine import (
    BookingState,
    BookingStateMachine,
    BookingTrigger,
    InvalidTransitionError,
)

__all__ = [
    "BookingCreationFlow",
    "BookingForm",
    "FieldStatus",
    "SlotSelectionError",
    "SlotFetcher",
    "BookingStateMachine",
    "BookingState",
    "BookingTrigger",
    "InvalidTransitionError",
]
