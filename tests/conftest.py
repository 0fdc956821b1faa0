import pytest

from metrics_emitter import Dimension, MetricEmitter


class FakeTimer:
    """Timer handle driven by FakeClock.advance()."""

    def __init__(self, clock, interval, function, name):
        self.clock = clock
        self.interval = interval
        self.function = function
        self.name = name
        self.next_fire = clock.now + interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Timer factory that only fires when time is advanced explicitly."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def start_timer(self, interval, function, name=None):
        timer = FakeTimer(self, interval, function, name)
        self.timers.append(timer)
        return timer

    def active_timers(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.next_fire <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_fire)
            self.now = timer.next_fire
            timer.next_fire += timer.interval
            timer.function()
        self.now = target


class RecordingBackend:
    """Backend client that records batches and completes them synchronously."""

    def __init__(self):
        self.batches = []
        self.error = None
        # raised from send_batch itself, one per call, before the batch is accepted
        self.send_errors = []
        self.closes = []

    def send_batch(self, namespace, data_points, callback):
        if self.send_errors:
            raise self.send_errors.pop(0)
        self.batches.append((namespace, list(data_points)))
        callback(self.error)

    def close(self, wait=True):
        self.closes.append(wait)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def make_emitter(clock, backend):
    """Factory building emitters wired to the fake clock and recording backend."""

    def _make(options=None, **kwargs):
        kwargs.setdefault('default_dimensions', [Dimension('environment', 'PROD')])
        return MetricEmitter(
            'namespace',
            'Count',
            options=options,
            backend_client=backend,
            timer_factory=clock.start_timer,
            **kwargs
        )

    return _make
