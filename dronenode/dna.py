"""Dynamic node ID allocation from the allocatee's side."""

from __future__ import annotations

import logging
import random

from .clock import Clock, ManualClock
from .messages import MAX_NODE_ID, UNIQUE_ID_LENGTH, Allocation
from .transport import BROADCAST_NODE_ID

log = logging.getLogger(__name__)

PREFERRED_NODE_ID = 73
_MILLIS_MASK = 0xFFFFFFFF


class DynamicNodeAllocator:
    """Runs the allocatee's part of the dynamic node ID allocation exchange.

    The unique ID is sent in stages of at most six bytes; each stage is only
    sent once the allocator has echoed back the bytes sent so far.
    """

    def __init__(
        self,
        unique_id: bytes,
        clock: Clock | ManualClock | None = None,
        *,
        preferred_node_id: int = PREFERRED_NODE_ID,
        rng: random.Random | None = None,
    ) -> None:
        uid = bytes(unique_id)
        if len(uid) != UNIQUE_ID_LENGTH:
            raise ValueError(f"unique id must be {UNIQUE_ID_LENGTH} bytes")
        if not 0 <= preferred_node_id <= MAX_NODE_ID:
            raise ValueError(f"preferred node id {preferred_node_id} out of range")
        self.unique_id = uid
        self.clock = clock if clock is not None else Clock()
        self.preferred_node_id = preferred_node_id
        self._rng = rng if rng is not None else random.Random()
        self.next_request_at_ms = 0
        self.unique_id_offset = 0
        self.allocated_node_id: int | None = None

    @property
    def allocated(self) -> bool:
        return self.allocated_node_id is not None

    def _reschedule(self) -> None:
        delay = Allocation.MIN_REQUEST_PERIOD_MS + self._rng.randrange(
            Allocation.MAX_FOLLOWUP_DELAY_MS
        )
        self.next_request_at_ms = (self.clock.millis() + delay) & _MILLIS_MASK

    def due(self) -> bool:
        """Whether a new allocation request should be broadcast now."""
        return not self.allocated and self.clock.millis() > self.next_request_at_ms

    def make_request(self) -> Allocation:
        """Build the next allocation request and schedule the one after it."""
        self._reschedule()
        offset = self.unique_id_offset
        size = min(UNIQUE_ID_LENGTH - offset, Allocation.MAX_LENGTH_OF_UNIQUE_ID_IN_REQUEST)
        request = Allocation(
            node_id=self.preferred_node_id,
            first_part_of_unique_id=offset == 0,
            unique_id=self.unique_id[offset : offset + size],
        )
        # If no answer arrives before the next request, start over.
        self.unique_id_offset = 0
        return request

    def handle_allocation(self, source_node_id: int, message: Allocation) -> int | None:
        """Process a received allocation message; return the node ID once allocated."""
        if self.allocated:
            return None

        self._reschedule()

        if source_node_id == BROADCAST_NODE_ID:
            log.info("Allocation request from another allocatee")
            self.unique_id_offset = 0
            return None

        received = bytes(message.unique_id)
        if received != self.unique_id[: len(received)]:
            log.info("Mismatching allocation response")
            self.unique_id_offset = 0
            return None

        if len(received) < UNIQUE_ID_LENGTH:
            self.unique_id_offset = len(received)
            self.next_request_at_ms = (
                self.next_request_at_ms - Allocation.MIN_REQUEST_PERIOD_MS
            ) & _MILLIS_MASK
            log.info("Matching allocation response: %d", len(received))
            return None

        self.allocated_node_id = message.node_id
        log.info("Node ID allocated: %d", message.node_id)
        return message.node_id