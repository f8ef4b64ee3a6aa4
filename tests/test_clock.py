import pytest

from dronenode.clock import Clock, ManualClock


def test_manual_clock_starts_at_given_time():
    clock = ManualClock(start_us=2500)
    assert clock.micros() == 2500


def test_manual_clock_advance_moves_micros_and_millis():
    clock = ManualClock()
    clock.advance(1500)
    assert clock.micros() == 1500
    assert clock.millis() == 1


def test_manual_clock_rejects_going_backwards():
    clock = ManualClock()
    with pytest.raises(ValueError):
        clock.advance(-1)


def test_manual_clock_rejects_negative_start():
    with pytest.raises(ValueError):
        ManualClock(start_us=-10)


def test_manual_clock_millis_wraps_at_32_bits():
    clock = ManualClock(start_us=(2**32) * 1000 + 5000)
    assert clock.millis() == 5


def test_real_clock_first_reading_is_zero():
    clock = Clock()
    assert clock.micros() == 0


def test_real_clock_is_monotonic():
    clock = Clock()
    readings = [clock.micros() for _ in range(50)]
    assert readings == sorted(readings)


def test_real_clock_millis_matches_micros():
    clock = Clock()
    before = clock.micros()
    ms = clock.millis()
    after = clock.micros()
    assert before // 1000 <= ms <= after // 1000