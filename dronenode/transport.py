"""Transfers and an in-process bus that carries them."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Hashable

BROADCAST_NODE_ID = 0
MAX_NODE_ID = 127
TRANSFER_ID_MODULO = 32


class TransportError(Exception):
    """Raised when a transfer cannot be sent."""


class TransferType(IntEnum):
    RESPONSE = 0
    REQUEST = 1
    BROADCAST = 2


class Priority(IntEnum):
    HIGHEST = 0
    HIGH = 8
    MEDIUM = 16
    LOW = 24
    LOWEST = 31


@dataclass(frozen=True)
class Transfer:
    transfer_type: TransferType
    message: Any
    source_node_id: int = BROADCAST_NODE_ID
    destination_node_id: int | None = None
    transfer_id: int = 0
    priority: Priority = Priority.MEDIUM


class InMemoryBus:
    """A bus endpoint that records what it sends and queues what it receives."""

    def __init__(self, node_id: int = BROADCAST_NODE_ID) -> None:
        self.node_id = node_id
        self.sent: list[Transfer] = []
        self._incoming: deque[Transfer] = deque()
        self._transfer_ids: dict[Hashable, int] = {}

    def next_transfer_id(self, key: Hashable) -> int:
        """Return the transfer ID to use for ``key`` and advance its counter."""
        current = self._transfer_ids.get(key, 0)
        self._transfer_ids[key] = (current + 1) % TRANSFER_ID_MODULO
        return current

    def broadcast(self, message: Any, priority: Priority = Priority.LOW) -> Transfer:
        """Send a message to every node."""
        key = (TransferType.BROADCAST, type(message))
        transfer = Transfer(
            transfer_type=TransferType.BROADCAST,
            message=message,
            source_node_id=self.node_id,
            transfer_id=self.next_transfer_id(key),
            priority=priority,
        )
        self.sent.append(transfer)
        return transfer

    def request(
        self, destination: int, message: Any, priority: Priority = Priority.MEDIUM
    ) -> Transfer:
        """Send a service request to one node."""
        self._check_can_address(destination)
        key = (TransferType.REQUEST, type(message), destination)
        transfer = Transfer(
            transfer_type=TransferType.REQUEST,
            message=message,
            source_node_id=self.node_id,
            destination_node_id=destination,
            transfer_id=self.next_transfer_id(key),
            priority=priority,
        )
        self.sent.append(transfer)
        return transfer

    def respond(self, transfer: Transfer, message: Any) -> Transfer:
        """Answer a received request, reusing its transfer ID and priority."""
        if transfer.transfer_type is not TransferType.REQUEST:
            raise ValueError("only requests can be answered")
        self._check_can_address(transfer.source_node_id)
        response = Transfer(
            transfer_type=TransferType.RESPONSE,
            message=message,
            source_node_id=self.node_id,
            destination_node_id=transfer.source_node_id,
            transfer_id=transfer.transfer_id,
            priority=transfer.priority,
        )
        self.sent.append(response)
        return response

    def deliver(self, transfer: Transfer) -> None:
        """Queue a transfer as if it had arrived from the bus."""
        self._incoming.append(transfer)

    def receive(self) -> Transfer | None:
        """Take the oldest arrived transfer, or ``None`` if nothing is waiting."""
        return self._incoming.popleft() if self._incoming else None

    def pop_sent(self) -> list[Transfer]:
        """Return everything sent so far and forget it."""
        sent, self.sent = self.sent, []
        return sent

    def _check_can_address(self, destination: int) -> None:
        if self.node_id == BROADCAST_NODE_ID:
            raise TransportError("an anonymous node cannot take part in services")
        if not 1 <= destination <= MAX_NODE_ID:
            raise ValueError(f"invalid destination node id {destination}")