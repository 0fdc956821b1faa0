import threading

from metrics_emitter.timers import RecurringTimer, start_timer


def test_timer_fires_repeatedly_until_cancelled():
    calls = []
    fired_twice = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) >= 2:
            fired_twice.set()

    timer = start_timer(0.01, tick, name='test-timer')
    try:
        assert fired_twice.wait(5)
    finally:
        timer.cancel()

    timer.thread.join(5)
    assert not timer.thread.is_alive()
    assert timer.cancelled


def test_timer_survives_errors():
    calls = []
    recovered = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError('boom')
        recovered.set()

    timer = RecurringTimer(0.01, tick).start()
    try:
        assert recovered.wait(5)
    finally:
        timer.cancel()


def test_cancel_is_idempotent_and_safe_before_start():
    timer = RecurringTimer(10, lambda: None)
    timer.cancel()
    timer.cancel()

    assert timer.cancelled
    assert timer.thread is None


def test_cancel_from_own_callback():
    stopped = threading.Event()
    holder = {}

    def tick():
        holder['timer'].cancel()
        stopped.set()

    holder['timer'] = RecurringTimer(0.01, tick)
    holder['timer'].start()

    assert stopped.wait(5)
    holder['timer'].thread.join(5)
    assert not holder['timer'].thread.is_alive()
