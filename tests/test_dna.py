import random

import pytest

from dronenode.clock import ManualClock
from dronenode.dna import DynamicNodeAllocator
from dronenode.messages import Allocation

UID = bytes(range(1, 17))


def make(start_us=0):
    clock = ManualClock(start_us)
    alloc = DynamicNodeAllocator(UID, clock, rng=random.Random(1))
    return alloc, clock


def test_not_due_at_time_zero_then_due():
    alloc, clock = make()
    assert alloc.due() is False
    clock.advance(2000)
    assert alloc.due() is True


def test_first_request_contents():
    alloc, clock = make(5_000_000)
    request = alloc.make_request()
    assert request.node_id == 73
    assert request.first_part_of_unique_id is True
    assert request.unique_id == UID[:6]
    assert request.encode()[0] == (73 << 1) | 1


def test_request_schedules_next_within_window():
    alloc, clock = make(5_000_000)
    now = clock.millis()
    alloc.make_request()
    assert now + 600 <= alloc.next_request_at_ms < now + 1000
    assert alloc.due() is False
    clock.advance(1_000_000)
    assert alloc.due() is True


def test_staged_exchange_completes():
    alloc, clock = make(5_000_000)
    first = alloc.make_request()
    assert alloc.handle_allocation(10, Allocation(unique_id=first.unique_id)) is None
    assert alloc.unique_id_offset == 6

    second = alloc.make_request()
    assert second.first_part_of_unique_id is False
    assert second.unique_id == UID[6:12]
    assert alloc.unique_id_offset == 0

    assert alloc.handle_allocation(10, Allocation(unique_id=UID[:12])) is None
    third = alloc.make_request()
    assert third.unique_id == UID[12:]

    result = alloc.handle_allocation(10, Allocation(node_id=42, unique_id=UID))
    assert result == 42
    assert alloc.allocated_node_id == 42
    assert alloc.due() is False


def test_partial_match_shortens_timeout():
    alloc, clock = make(5_000_000)
    now = clock.millis()
    alloc.handle_allocation(10, Allocation(unique_id=UID[:6]))
    assert now <= alloc.next_request_at_ms < now + 400


def test_mismatch_resets_offset():
    alloc, _ = make(5_000_000)
    alloc.handle_allocation(10, Allocation(unique_id=UID[:6]))
    assert alloc.unique_id_offset == 6
    wrong = bytes([0xEE]) + UID[1:6]
    assert alloc.handle_allocation(10, Allocation(unique_id=wrong)) is None
    assert alloc.unique_id_offset == 0
    assert alloc.allocated_node_id is None


def test_anonymous_source_resets_offset():
    alloc, _ = make(5_000_000)
    alloc.handle_allocation(10, Allocation(unique_id=UID[:6]))
    assert alloc.handle_allocation(0, Allocation(node_id=5, unique_id=UID)) is None
    assert alloc.unique_id_offset == 0
    assert alloc.allocated_node_id is None


def test_ignores_messages_once_allocated():
    alloc, _ = make(5_000_000)
    assert alloc.handle_allocation(10, Allocation(node_id=42, unique_id=UID)) == 42
    before = alloc.next_request_at_ms
    assert alloc.handle_allocation(10, Allocation(node_id=50, unique_id=UID)) is None
    assert alloc.allocated_node_id == 42
    assert alloc.next_request_at_ms == before


def test_request_round_trips_through_wire_form():
    alloc, _ = make(5_000_000)
    request = alloc.make_request()
    assert Allocation.decode(request.encode()) == request


def test_rejects_bad_unique_id_length():
    with pytest.raises(ValueError):
        DynamicNodeAllocator(b"\x01\x02", ManualClock())


def test_rejects_bad_preferred_node_id():
    with pytest.raises(ValueError):
        DynamicNodeAllocator(UID, ManualClock(), preferred_node_id=200)