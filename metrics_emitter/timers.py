"""
Recurring timer used to drive the flush schedules.
"""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RecurringTimer:
    """Runs a function every `interval` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, function: Callable[[], None], name: Optional[str] = None):
        """
        Initialize the timer. Call start() to begin firing.

        Args:
            interval (float): Seconds between calls
            function (callable): Function to call, takes no arguments
            name (str, optional): Thread name, useful in logs
        """
        self.interval = interval
        self.function = function
        self.name = name or f"recurring-timer-{id(self):x}"
        self._stopped = threading.Event()
        self.thread = None

    def start(self) -> 'RecurringTimer':
        if self.thread is not None:
            logger.warning("Timer %s already started", self.name)
            return self
        self.thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self.thread.start()
        return self

    def _run(self) -> None:
        # Event.wait returns True once cancelled
        while not self._stopped.wait(self.interval):
            try:
                self.function()
            except Exception as e:
                logger.error("Error in timer %s: %s", self.name, str(e))

    def cancel(self) -> None:
        """Stop future firings. Safe to call more than once, and from the timer's own thread."""
        self._stopped.set()

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()


def start_timer(interval: float, function: Callable[[], None], name: Optional[str] = None) -> RecurringTimer:
    """Create and start a RecurringTimer. This is the emitter's default timer factory."""
    return RecurringTimer(interval, function, name=name).start()
