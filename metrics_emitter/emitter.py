"""
Metric emitter: buffers points and summaries and flushes them to a backend.

Writes never send anything themselves. Discrete points are sent on the
point flush interval, or immediately once max_batch_capacity points are
buffered. Summaries are sent on their own interval:

    emitter = MetricEmitter('my-service', 'Milliseconds', [Dimension('env', 'prod')])
    emitter.put(12.5, 'request_latency', [Dimension('route', '/items')])
    emitter.summary_put(12.5, 'request_latency_summary')
    ...
    emitter.shutdown()
"""
import logging
import random
import threading
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple

from .http_client import FlushCallback, create_default_client
from .metrics_buffer import MetricsBuffer
from .models import (
    DataPoint,
    Dimension,
    DimensionLike,
    MetricOptions,
    StatisticsPoint,
    as_dimensions,
    utc_now,
)
from .summary_table import SummaryTable, make_key
from .timers import start_timer

logger = logging.getLogger(__name__)


class BackendClient(Protocol):
    def send_batch(self, namespace: str, data_points: List[Any], callback: FlushCallback) -> None:
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None], str], TimerHandle]


class EmitterState(Enum):
    DISABLED = 'disabled'
    ACTIVE = 'active'
    SHUTTING_DOWN = 'shutting_down'
    STOPPED = 'stopped'


class MetricEmitter:
    """
    Buffers metrics for one namespace and dispatches them in batches.

    Each emitter owns its point buffer and summary table. Mutations happen
    under one re-entrant lock so the flush timers and application threads
    never see a half-drained buffer, and batches are dispatched in flush order.
    """

    def __init__(
        self,
        namespace: str,
        unit: str,
        default_dimensions: Optional[Iterable[DimensionLike]] = None,
        options: Optional[MetricOptions] = None,
        backend_client: Optional[BackendClient] = None,
        timer_factory: TimerFactory = start_timer,
        random_source: Callable[[], float] = random.random
    ):
        """
        Initialize the emitter and, if enabled, start both flush timers.

        Args:
            namespace (str): Namespace every batch is sent under
            unit (str): Default unit for writes that do not override it
            default_dimensions (iterable, optional): Dimensions prepended to every write
            options (MetricOptions, optional): Buffering options. Defaults to MetricOptions().
            backend_client (optional): Client with send_batch(). Defaults to a client
                built from the settings passed to initialize().
            timer_factory (callable): Starts a recurring timer, returns a handle with cancel()
            random_source (callable): Returns a float in [0, 1), used by sample()
        """
        self.namespace = namespace
        self.unit = unit
        self.default_dimensions: Tuple[Dimension, ...] = as_dimensions(default_dimensions)
        self.options = options or MetricOptions()
        self._timer_factory = timer_factory
        self._random = random_source
        self._lock = threading.RLock()
        self._points = MetricsBuffer()
        self._summaries = SummaryTable()
        self._point_timer: Optional[TimerHandle] = None
        self._summary_timer: Optional[TimerHandle] = None
        # Clients created here are closed by shutdown()
        self._owns_client = False

        if not self.options.enabled:
            self.backend_client = backend_client
            self.state = EmitterState.DISABLED
            logger.debug("Metrics disabled for namespace %s", namespace)
            return

        if backend_client is None:
            backend_client = create_default_client()
            self._owns_client = True
        self.backend_client = backend_client
        self.state = EmitterState.ACTIVE
        self._point_timer = self._start_point_timer()
        self._summary_timer = self._timer_factory(
            self.options.summary_flush_interval,
            self._on_summary_timer,
            f"{namespace}-summary-flush"
        )

    def __enter__(self) -> 'MetricEmitter':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()

    def _start_point_timer(self) -> TimerHandle:
        return self._timer_factory(
            self.options.point_flush_interval,
            self._on_point_timer,
            f"{self.namespace}-point-flush"
        )

    def _on_point_timer(self) -> None:
        self.flush_points()

    def _on_summary_timer(self) -> None:
        self.flush_summaries()

    def _accepts_writes(self, metric_name: str) -> bool:
        if self.state is EmitterState.ACTIVE:
            return True
        if self.state is not EmitterState.DISABLED:
            logger.warning("Dropping write to %s: emitter for %s is shut down", metric_name, self.namespace)
        return False

    def _merge_dimensions(self, dimensions: Optional[Iterable[DimensionLike]]) -> Tuple[Dimension, ...]:
        return self.default_dimensions + as_dimensions(dimensions)

    def put(
        self,
        value: float,
        metric_name: str,
        dimensions: Optional[Iterable[DimensionLike]] = None,
        unit: Optional[str] = None
    ) -> None:
        """
        Buffer a data point.

        Reaching max_batch_capacity flushes immediately and restarts the
        point flush interval from now.

        Args:
            value (float): Data point to submit
            metric_name (str): Name of the metric
            dimensions (iterable, optional): Dimensions appended after the defaults
            unit (str, optional): Overrides the emitter's unit
        """
        with self._lock:
            if not self._accepts_writes(metric_name):
                return

            point = DataPoint(
                metric_name=metric_name,
                dimensions=self._merge_dimensions(dimensions),
                unit=unit or self.unit,
                value=value,
                timestamp=utc_now() if self.options.include_timestamp else None,
                storage_resolution=self.options.storage_resolution,
            )

            if self._points.append(point) >= self.options.max_batch_capacity:
                if self._point_timer is not None:
                    self._point_timer.cancel()
                try:
                    self.flush_points()
                finally:
                    self._point_timer = self._start_point_timer()

    def summary_put(
        self,
        value: float,
        metric_name: str,
        dimensions: Optional[Iterable[DimensionLike]] = None,
        unit: Optional[str] = None
    ) -> None:
        """
        Add a value to the running summary for a metric identity.

        The identity is the metric name, unit and dimensions in order, so
        reordering the dimensions starts a separate summary. Summaries are
        only sent on the summary flush interval or at shutdown.

        Args:
            value (float): The value to include in the summary
            metric_name (str): Name of the metric
            dimensions (iterable, optional): Dimensions appended after the defaults
            unit (str, optional): Overrides the emitter's unit
        """
        with self._lock:
            if not self._accepts_writes(metric_name):
                return

            unit = unit or self.unit
            all_dimensions = self._merge_dimensions(dimensions)
            identity = make_key(metric_name, unit, all_dimensions)
            self._summaries.write_value(identity, metric_name, unit, all_dimensions, value)

    def sample(
        self,
        value: float,
        metric_name: str,
        dimensions: Optional[Iterable[DimensionLike]],
        sample_rate: float,
        unit: Optional[str] = None
    ) -> None:
        """
        Buffer a data point with probability sample_rate.

        A sample_rate of 0.1 writes the point 10% of the time. The rate is
        not validated: >= 1 always writes, <= 0 never does.
        """
        if self._random() < sample_rate:
            self.put(value, metric_name, dimensions, unit=unit)

    def _dispatch(self, batch: List[Any]) -> None:
        # A client that fails before accepting the batch still reports through the callback
        callback = self.options.on_flush_complete
        try:
            self.backend_client.send_batch(self.namespace, batch, callback)
        except Exception as e:
            logger.error("Failed to dispatch %d metrics for namespace %s: %s", len(batch), self.namespace, str(e))
            try:
                callback(e)
            except Exception as callback_error:
                logger.error("Error in flush callback: %s", str(callback_error))

    def flush_points(self) -> None:
        """Send all buffered data points as one batch. Nothing is sent when the buffer is empty."""
        with self._lock:
            points = self._points.drain()
            if not points:
                return
            logger.debug("Flushing %d points for namespace %s", len(points), self.namespace)
            self._dispatch(points)

    def flush_summaries(self) -> None:
        """
        Send every summary holding data, in batches of at most
        max_batch_capacity records, and reset the summaries.
        """
        with self._lock:
            records = [
                StatisticsPoint(metric_name=name, dimensions=dims, unit=unit, statistics=stats)
                for name, unit, dims, stats in self._summaries.drain_all()
            ]
            if not records:
                return

            capacity = self.options.max_batch_capacity
            logger.debug("Flushing %d summaries for namespace %s", len(records), self.namespace)
            for start in range(0, len(records), capacity):
                self._dispatch(records[start:start + capacity])

    def shutdown(self) -> None:
        """
        Stop both timers and send anything still buffered.

        Batches already in flight are not cancelled. Calling this again is safe.
        """
        with self._lock:
            if self.state is EmitterState.STOPPED:
                return

            was_active = self.state is EmitterState.ACTIVE
            if was_active:
                self.state = EmitterState.SHUTTING_DOWN

            for timer in (self._point_timer, self._summary_timer):
                if timer is not None:
                    timer.cancel()
            self._point_timer = None
            self._summary_timer = None

            self.flush_points()
            self.flush_summaries()

            if self._owns_client:
                # Batches already queued still run after close(wait=False)
                self.backend_client.close(wait=False)

            if was_active:
                self.state = EmitterState.STOPPED
                logger.debug("Emitter for namespace %s stopped", self.namespace)

    def has_pending_points(self) -> bool:
        """
        Get whether buffered data points exist.

        Returns:
            bool: True if at least one point is waiting to be flushed
        """
        return len(self._points) > 0

    @property
    def summary_count(self) -> int:
        """Number of summary identities tracked, including ones currently holding no data."""
        return len(self._summaries)
