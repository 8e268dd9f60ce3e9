"""
Finite state machine for the new-booking dialog.

Defines the creation states and the explicit transitions between them.
Every dialog follows a deterministic path through the state graph:

    Idle -> ServiceSelected -> DateSelected -> SlotsLoaded -> SlotSelected
         -> Submitting -> Created | Failed

Changing services or date once slots are loaded drops back to SlotsLoaded
(the chosen slot no longer matches the inputs). A failed submission goes
back to SlotSelected so the filled form can be resubmitted.

Usage:
    sm = BookingStateMachine()
    sm.transition(BookingTrigger.SERVICES_CHOSEN)
    assert sm.current_state == BookingState.SERVICE_SELECTED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class BookingState(str, Enum):
    """All possible states of a booking being created."""
    IDLE = "idle"
    SERVICE_SELECTED = "service_selected"
    DATE_SELECTED = "date_selected"
    SLOTS_LOADED = "slots_loaded"
    SLOT_SELECTED = "slot_selected"
    SUBMITTING = "submitting"
    CREATED = "created"
    FAILED = "failed"


class BookingTrigger(str, Enum):
    """Events that cause state transitions."""
    SERVICES_CHOSEN = "services_chosen"
    DATE_CHOSEN = "date_chosen"
    SLOTS_RECEIVED = "slots_received"
    SLOT_CHOSEN = "slot_chosen"
    INPUTS_CHANGED = "inputs_changed"
    SUBMIT = "submit"
    SUBMIT_SUCCEEDED = "submit_succeeded"
    SUBMIT_FAILED = "submit_failed"
    RETRY = "retry"
    RESET = "reset"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: BookingState
    to_state: BookingState
    trigger: BookingTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: BookingState
    entered_at: datetime
    trigger: Optional[BookingTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class BookingStateMachine:
    """
    Deterministic state machine for booking creation.

    Every transition must be explicitly defined. An event with no
    matching transition is rejected with an error listing what is allowed.
    """

    TRANSITIONS: list[Transition] = [
        # --- Inputs ---
        Transition(BookingState.IDLE, BookingState.SERVICE_SELECTED,
                   BookingTrigger.SERVICES_CHOSEN),
        Transition(BookingState.IDLE, BookingState.IDLE,
                   BookingTrigger.DATE_CHOSEN),
        Transition(BookingState.SERVICE_SELECTED, BookingState.SERVICE_SELECTED,
                   BookingTrigger.SERVICES_CHOSEN),
        Transition(BookingState.SERVICE_SELECTED, BookingState.DATE_SELECTED,
                   BookingTrigger.DATE_CHOSEN),

        # --- Slot fetch ---
        Transition(BookingState.DATE_SELECTED, BookingState.SLOTS_LOADED,
                   BookingTrigger.SLOTS_RECEIVED),
        Transition(BookingState.DATE_SELECTED, BookingState.DATE_SELECTED,
                   BookingTrigger.INPUTS_CHANGED),

        # --- Slot choice ---
        Transition(BookingState.SLOTS_LOADED, BookingState.SLOT_SELECTED,
                   BookingTrigger.SLOT_CHOSEN),
        Transition(BookingState.SLOTS_LOADED, BookingState.SLOTS_LOADED,
                   BookingTrigger.INPUTS_CHANGED),
        Transition(BookingState.SLOTS_LOADED, BookingState.SLOTS_LOADED,
                   BookingTrigger.SLOTS_RECEIVED),
        Transition(BookingState.SLOT_SELECTED, BookingState.SLOT_SELECTED,
                   BookingTrigger.SLOT_CHOSEN),
        Transition(BookingState.SLOT_SELECTED, BookingState.SLOTS_LOADED,
                   BookingTrigger.INPUTS_CHANGED),

        # --- Submission ---
        Transition(BookingState.SLOT_SELECTED, BookingState.SUBMITTING,
                   BookingTrigger.SUBMIT),
        Transition(BookingState.SUBMITTING, BookingState.CREATED,
                   BookingTrigger.SUBMIT_SUCCEEDED),
        Transition(BookingState.SUBMITTING, BookingState.FAILED,
                   BookingTrigger.SUBMIT_FAILED),
        Transition(BookingState.FAILED, BookingState.SLOT_SELECTED,
                   BookingTrigger.RETRY),

        # --- Start over ---
        Transition(BookingState.CREATED, BookingState.IDLE,
                   BookingTrigger.RESET),
    ]

    def __init__(self) -> None:
        self._current_state = BookingState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=BookingState.IDLE, entered_at=datetime.now(timezone.utc))
        ]
        self._failure_count: int = 0

    @property
    def current_state(self) -> BookingState:
        return self._current_state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def can(self, trigger: BookingTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def transition(self, trigger: BookingTrigger) -> BookingState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new booking state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                if t.to_state == BookingState.FAILED:
                    self._failure_count += 1

                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[BookingTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        """Check if the booking has been created."""
        return self._current_state == BookingState.CREATED
