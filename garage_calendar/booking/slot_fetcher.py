"""
Last-request-wins slot fetching.

Every fetch is tagged with a monotonically increasing sequence number.
When a response arrives, it is applied only if its sequence is still the
latest issued; responses to superseded requests are discarded, so a slow
earlier answer can never overwrite the slots of a newer selection.
"""

import logging
from typing import Optional

from garage_calendar.schemas.slot_schema import Slot, SlotRequest
from garage_calendar.tools.availability import SlotSource

logger = logging.getLogger(__name__)


class SlotFetcher:
    """Holds the current slot list for one booking dialog."""

    def __init__(self, source: SlotSource) -> None:
        self.source = source
        self.slots: list[Slot] = []
        self.last_error: Optional[str] = None
        self._latest_seq = 0

    @property
    def latest_sequence(self) -> int:
        return self._latest_seq

    def invalidate(self) -> None:
        """Drop current slots and make any in-flight response stale."""
        self._latest_seq += 1
        self.slots = []

    async def fetch(self, request: SlotRequest) -> Optional[list[Slot]]:
        """Fetch slots for ``request``.

        Returns the slots if this was still the latest request when the
        response arrived, otherwise None. A failed fetch yields an empty
        list and sets ``last_error``.
        """
        self._latest_seq += 1
        seq = self._latest_seq
        self.slots = []
        logger.debug("Slot request #%d: %s on %s", seq, request.service_ids, request.date)

        error: Optional[str] = None
        try:
            slots = await self.source.fetch_slots(request)
        except Exception as exc:
            logger.exception("Slot request #%d failed", seq)
            slots = []
            error = f"Could not load slots: {exc}"

        if seq != self._latest_seq:
            logger.debug("Discarding stale slot response #%d (latest #%d)", seq, self._latest_seq)
            return None

        self.slots = slots
        self.last_error = error
        return slots

    def find(self, key: str) -> Optional[Slot]:
        """Look up a loaded slot by its key."""
        for slot in self.slots:
            if slot.key == key:
                return slot
        return None
