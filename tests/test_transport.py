import pytest

from dronenode.messages import GetNodeInfoRequest, NodeInfo, NodeStatus, RawCommand
from dronenode.transport import (
    InMemoryBus,
    Priority,
    Transfer,
    TransferType,
    TransportError,
)


def test_broadcast_records_transfer():
    bus = InMemoryBus(node_id=97)
    status = NodeStatus(uptime_sec=3)
    transfer = bus.broadcast(status, Priority.LOW)
    assert bus.sent == [transfer]
    assert transfer.transfer_type is TransferType.BROADCAST
    assert transfer.source_node_id == 97
    assert transfer.message is status
    assert transfer.priority is Priority.LOW


def test_broadcast_transfer_ids_wrap_at_32():
    bus = InMemoryBus(node_id=5)
    ids = [bus.broadcast(NodeStatus()).transfer_id for _ in range(33)]
    assert ids == list(range(32)) + [0]


def test_transfer_ids_are_counted_per_message_type():
    bus = InMemoryBus(node_id=5)
    bus.broadcast(NodeStatus())
    bus.broadcast(NodeStatus())
    first_raw = bus.broadcast(RawCommand())
    assert first_raw.transfer_id == 0


def test_next_transfer_id_advances_per_key():
    bus = InMemoryBus()
    assert [bus.next_transfer_id("a") for _ in range(3)] == [0, 1, 2]
    assert bus.next_transfer_id("b") == 0


def test_anonymous_broadcast_allowed():
    bus = InMemoryBus()
    transfer = bus.broadcast(NodeStatus())
    assert transfer.source_node_id == 0


def test_respond_reuses_request_identity():
    bus = InMemoryBus(node_id=97)
    request = Transfer(
        TransferType.REQUEST,
        GetNodeInfoRequest(),
        source_node_id=10,
        destination_node_id=97,
        transfer_id=7,
        priority=Priority.HIGH,
    )
    response = bus.respond(request, NodeInfo(name="n"))
    assert response.transfer_type is TransferType.RESPONSE
    assert response.destination_node_id == 10
    assert response.transfer_id == 7
    assert response.priority is Priority.HIGH


def test_respond_rejects_non_request():
    bus = InMemoryBus(node_id=97)
    broadcast = Transfer(TransferType.BROADCAST, NodeStatus(), source_node_id=3)
    with pytest.raises(ValueError):
        bus.respond(broadcast, NodeInfo())


def test_request_requires_local_node_id():
    bus = InMemoryBus()
    with pytest.raises(TransportError):
        bus.request(10, GetNodeInfoRequest())


@pytest.mark.parametrize("destination", [0, 128])
def test_request_rejects_invalid_destination(destination):
    bus = InMemoryBus(node_id=4)
    with pytest.raises(ValueError):
        bus.request(destination, GetNodeInfoRequest())


def test_request_transfer_ids_per_destination():
    bus = InMemoryBus(node_id=4)
    first = bus.request(10, GetNodeInfoRequest())
    second = bus.request(10, GetNodeInfoRequest())
    other = bus.request(11, GetNodeInfoRequest())
    assert (first.transfer_id, second.transfer_id, other.transfer_id) == (0, 1, 0)
    assert first.destination_node_id == 10


def test_deliver_and_receive_fifo():
    bus = InMemoryBus(node_id=4)
    a = Transfer(TransferType.BROADCAST, NodeStatus(uptime_sec=1), source_node_id=2)
    b = Transfer(TransferType.BROADCAST, NodeStatus(uptime_sec=2), source_node_id=2)
    bus.deliver(a)
    bus.deliver(b)
    assert bus.receive() is a
    assert bus.receive() is b
    assert bus.receive() is None


def test_pop_sent_clears_record():
    bus = InMemoryBus(node_id=4)
    bus.broadcast(NodeStatus())
    popped = bus.pop_sent()
    assert len(popped) == 1
    assert bus.sent == []