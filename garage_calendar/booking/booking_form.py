"""
Field manager for the new-booking form: Collect -> Validate -> Submit.

Each customer and vehicle field is validated and normalized as it is
entered. The form only becomes submittable once every required field is
valid, at least one service is chosen, and a slot has been explicitly
selected. Nothing is selected by default.

Usage:
    form = BookingForm()
    ok, msg = form.set_field("customer_name", "jane doe")
    form.set_services(["oil-change"])
    form.select_slot(slot)
    if form.is_valid():
        payload = form.to_payload()
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Optional

from garage_calendar.schemas.booking_schema import (
    BookingCreateRequest,
    CustomerPayload,
    ServicePayload,
    VehiclePayload,
)
from garage_calendar.schemas.slot_schema import Slot
from garage_calendar.utils import normalize_phone

logger = logging.getLogger(__name__)

# Validation thresholds
MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15
MIN_REGISTRATION_LENGTH = 2
MIN_VEHICLE_YEAR = 1900

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FieldStatus(str, Enum):
    """Lifecycle status of a form field."""

    EMPTY = "empty"
    INVALID = "invalid"
    VALID = "valid"


class SlotSelectionError(Exception):
    """Raised when a slot cannot be selected."""


def _validate_name(value: str) -> bool:
    return len(value.strip()) >= MIN_NAME_LENGTH


def _validate_phone(value: str) -> bool:
    digits = re.sub(r"[^\d]", "", value)
    return MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS


def _validate_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def _validate_text(value: str) -> bool:
    return bool(value.strip())


def _validate_year(value: str) -> bool:
    value = value.strip()
    if not value.isdigit():
        return False
    return MIN_VEHICLE_YEAR <= int(value) <= datetime.now().year + 1


def _validate_registration(value: str) -> bool:
    return len(value.replace(" ", "")) >= MIN_REGISTRATION_LENGTH


@dataclass(frozen=True)
class FieldDefinition:
    """Schema for a single form field."""

    name: str
    display_name: str
    required: bool = True
    validator: Optional[Callable[[str], bool]] = None


@dataclass
class FieldValue:
    """Current state of a form field."""

    raw_value: Optional[str] = None
    normalized_value: Optional[str] = None
    status: FieldStatus = FieldStatus.EMPTY
    attempts: int = 0


class BookingForm:
    """
    Holds the customer, vehicle, service, date and slot choices of one
    booking being created.
    """

    FIELD_DEFINITIONS: list[FieldDefinition] = [
        FieldDefinition("customer_name", "customer name", validator=_validate_name),
        FieldDefinition("customer_email", "email", validator=_validate_email),
        FieldDefinition("customer_phone", "phone number", validator=_validate_phone),
        FieldDefinition("vehicle_make", "vehicle make", validator=_validate_text),
        FieldDefinition("vehicle_model", "vehicle model", validator=_validate_text),
        FieldDefinition("vehicle_year", "vehicle year", validator=_validate_year),
        FieldDefinition("vehicle_registration", "registration", validator=_validate_registration),
        FieldDefinition("notes", "notes", required=False),
    ]

    def __init__(self) -> None:
        self.fields: dict[str, FieldValue] = {
            defn.name: FieldValue() for defn in self.FIELD_DEFINITIONS
        }
        self.service_ids: list[str] = []
        self.date: Optional[date] = None
        self.selected_slot: Optional[Slot] = None

    def _get_definition(self, name: str) -> FieldDefinition:
        for defn in self.FIELD_DEFINITIONS:
            if defn.name == name:
                return defn
        raise ValueError(f"Unknown field: {name}")

    def _normalize(self, name: str, value: str) -> str:
        """Apply field-specific normalization rules."""
        value = value.strip()
        if name == "customer_phone":
            return normalize_phone(value)
        if name == "customer_email":
            return value.lower()
        if name == "customer_name":
            return value.title()
        if name == "vehicle_registration":
            return value.upper()
        return value

    def set_field(self, name: str, raw_value: str) -> tuple[bool, str]:
        """
        Set a field value with validation.

        Returns:
            (success, message) where success=True if validation passed.
        """
        defn = self._get_definition(name)
        current = self.fields[name]
        current.raw_value = raw_value
        current.attempts += 1

        if not raw_value.strip() and not defn.required:
            current.normalized_value = None
            current.status = FieldStatus.EMPTY
            return True, f"Cleared {defn.display_name}"

        if defn.validator and not defn.validator(raw_value):
            current.normalized_value = None
            current.status = FieldStatus.INVALID
            logger.debug("Field '%s' validation failed: '%s'", name, raw_value)
            return False, f"The {defn.display_name} '{raw_value}' doesn't look right."

        current.normalized_value = self._normalize(name, raw_value)
        current.status = FieldStatus.VALID
        return True, f"Got {defn.display_name}: {current.normalized_value}"

    def get_value(self, name: str) -> Optional[str]:
        """Get the normalized value of a field."""
        return self.fields[name].normalized_value

    def set_services(self, service_ids: list[str]) -> bool:
        """Replace the chosen services. Returns True if the selection changed.

        A change invalidates any selected slot.
        """
        new_ids = list(dict.fromkeys(service_ids))
        if new_ids == self.service_ids:
            return False
        self.service_ids = new_ids
        self.clear_slot()
        return True

    def set_date(self, value: date) -> bool:
        """Set the booking date. Returns True if it changed; a change drops the slot."""
        if value == self.date:
            return False
        self.date = value
        self.clear_slot()
        return True

    def select_slot(self, slot: Slot) -> None:
        if not slot.is_available:
            raise SlotSelectionError(f"Slot {slot.key} is not available")
        self.selected_slot = slot

    def clear_slot(self) -> None:
        if self.selected_slot is not None:
            logger.debug("Selected slot %s cleared", self.selected_slot.key)
        self.selected_slot = None

    def get_missing_fields(self) -> list[FieldDefinition]:
        """Required fields that are empty or invalid."""
        return [
            defn
            for defn in self.FIELD_DEFINITIONS
            if defn.required and self.fields[defn.name].status != FieldStatus.VALID
        ]

    def all_required_filled(self) -> bool:
        return not self.get_missing_fields()

    def is_valid(self) -> bool:
        """Customer, vehicle, services, date and an explicit slot are all present."""
        return (
            self.all_required_filled()
            and bool(self.service_ids)
            and self.date is not None
            and self.selected_slot is not None
        )

    def to_payload(self) -> BookingCreateRequest:
        """Serialize the form and selected slot into a create-booking request."""
        if not self.is_valid():
            missing = [d.display_name for d in self.get_missing_fields()]
            raise ValueError(f"Booking form incomplete, missing: {missing}")

        slot = self.selected_slot
        name = self.get_value("customer_name") or ""
        first, _, last = name.partition(" ")
        notes = self.get_value("notes") or ""

        return BookingCreateRequest(
            date=self.date.isoformat(),
            customer=CustomerPayload(
                first_name=first or name,
                last_name=last,
                email=self.get_value("customer_email") or "",
                phone=self.get_value("customer_phone") or "",
            ),
            vehicle=VehiclePayload(
                make=self.get_value("vehicle_make") or "",
                model=self.get_value("vehicle_model") or "",
                year=int(self.get_value("vehicle_year") or 0),
                license_plate=self.get_value("vehicle_registration") or "",
            ),
            services=[
                ServicePayload(
                    service_id=svc.service.id,
                    technician_id=svc.technician.id,
                    bay_id=slot.bay.id,
                    start_time=svc.start_time.isoformat(),
                    end_time=svc.end_time.isoformat(),
                    notes=notes,
                )
                for svc in slot.services
            ],
            notes=notes,
        )

    def reset(self) -> None:
        self.__init__()
