#!filepath: tests/test_scheduler.py
import pytest

from tradesim.core import VirtualScheduler


def test_timers_fire_in_time_order(scheduler):
    fired = []
    scheduler.call_later(300, lambda: fired.append("c"))
    scheduler.call_later(100, lambda: fired.append("a"))
    scheduler.call_later(200, lambda: fired.append("b"))

    assert scheduler.advance(1000) == 3
    assert fired == ["a", "b", "c"]


def test_same_instant_keeps_arming_order(scheduler):
    fired = []
    for name in ["first", "second", "third"]:
        scheduler.call_later(50, lambda n=name: fired.append(n))

    scheduler.advance(50)
    assert fired == ["first", "second", "third"]


def test_clock_is_set_before_each_callback(scheduler):
    seen = []
    scheduler.call_later(120, lambda: seen.append(scheduler.now()))
    scheduler.call_later(480, lambda: seen.append(scheduler.now()))

    scheduler.advance(1000)
    assert seen == [120, 480]
    assert scheduler.now() == 1000


def test_wall_time_adds_epoch():
    s = VirtualScheduler(epoch_ms=1_000_000)
    s.advance(2500)
    assert s.wall_time_ms() == 1_002_500


def test_timers_outside_window_stay_pending(scheduler):
    fired = []
    scheduler.call_later(100, lambda: fired.append(1))
    scheduler.call_later(5000, lambda: fired.append(2))

    scheduler.advance(1000)
    assert fired == [1]
    assert scheduler.pending() == 1
    assert scheduler.next_fire_at() == 5000


def test_callbacks_can_arm_new_timers_inside_window(scheduler):
    fired = []

    def chain():
        fired.append(scheduler.now())
        if len(fired) < 3:
            scheduler.call_later(100, chain)

    scheduler.call_later(100, chain)
    scheduler.advance(1000)
    assert fired == [100, 200, 300]


def test_cancelled_timer_never_fires(scheduler):
    fired = []
    handle = scheduler.call_later(100, lambda: fired.append(1))
    scheduler.cancel(handle)

    assert scheduler.advance(1000) == 0
    assert fired == []


def test_cancel_owner_is_exact(scheduler):
    fired = []
    scheduler.call_later(100, lambda: fired.append("a1"), owner="bots/a")
    scheduler.call_later(200, lambda: fired.append("a2"), owner="bots/a")
    scheduler.call_later(150, lambda: fired.append("b1"), owner="bots/b")

    assert scheduler.cancel_owner("bots/a") == 2
    assert scheduler.pending("bots/a") == 0
    assert scheduler.pending("bots/b") == 1

    scheduler.advance(1000)
    assert fired == ["b1"]


def test_negative_delay_fires_immediately(scheduler):
    fired = []
    scheduler.advance(500)
    scheduler.call_later(-50, lambda: fired.append(scheduler.now()))

    scheduler.advance(0)
    assert fired == [500]


def test_listener_exception_propagates(scheduler):
    def boom():
        raise RuntimeError("listener failed")

    scheduler.call_later(10, boom)
    with pytest.raises(RuntimeError, match="listener failed"):
        scheduler.advance(100)
