import pytest

from tenebris.clock import FixedIntervalTimer, FrameClock, ManualClock


def test_frame_clock_first_tick_is_zero():
    fc = FrameClock(0.033)
    assert fc.tick(5.0) == 0.0
    assert fc.tick(5.01) == pytest.approx(0.01)


def test_frame_clock_clamps_long_frames():
    fc = FrameClock(0.033)
    fc.tick(1.0)
    assert fc.tick(3.0) == 0.033


def test_frame_clock_never_negative():
    fc = FrameClock(0.033)
    fc.tick(2.0)
    assert fc.tick(1.0) == 0.0


def test_frame_clock_reset():
    fc = FrameClock(0.033)
    fc.tick(1.0)
    fc.reset()
    assert fc.tick(100.0) == 0.0


def test_timer_counts_whole_periods_and_carries():
    t = FixedIntervalTimer(100)
    t.start()
    assert t.advance(250) == 2
    assert t.advance(40) == 0
    assert t.advance(10) == 1


def test_timer_idle_when_stopped():
    t = FixedIntervalTimer(100)
    assert t.advance(1000) == 0
    t.start()
    t.advance(90)
    t.stop()
    t.start()
    # stopping discards the partial period
    assert t.advance(20) == 0


def test_timer_rejects_bad_period():
    with pytest.raises(ValueError):
        FixedIntervalTimer(0)
    t = FixedIntervalTimer(100)
    with pytest.raises(ValueError):
        t.rearm(-5)


def test_timer_rearm_changes_period():
    t = FixedIntervalTimer(150)
    t.rearm(70)
    assert t.running
    assert t.advance(140) == 2


def test_manual_clock():
    c = ManualClock(10)
    assert c() == 10
    c.advance(5)
    assert c() == 15
