"""
Data model for buffered metrics.

Records produced here are what the emitter hands to a backend client:
- DataPoint: a single discrete measurement
- StatisticsPoint: an aggregated min/max/sum/count summary for one identity
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

import pytz

from . import config

logger = logging.getLogger(__name__)

MAX_BATCH_CAPACITY = config.MAX_BATCH_CAPACITY


@dataclass(frozen=True)
class Dimension:
    """A named key/value tag attached to a metric."""
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'value': self.value}


DimensionLike = Union[Dimension, Tuple[str, str], Dict[str, str]]


def as_dimension(item: DimensionLike) -> Dimension:
    """
    Normalize a dimension given as a Dimension, a (name, value) pair or a
    {'name': ..., 'value': ...} mapping.

    Args:
        item: The dimension to normalize

    Returns:
        Dimension: The normalized dimension

    Raises:
        TypeError: If the item has none of the accepted shapes
    """
    if isinstance(item, Dimension):
        return item
    if isinstance(item, dict):
        return Dimension(name=item['name'], value=item['value'])
    if isinstance(item, (tuple, list)) and len(item) == 2:
        return Dimension(name=item[0], value=item[1])
    raise TypeError(f"Cannot use {item!r} as a dimension")


def as_dimensions(items: Optional[Iterable[DimensionLike]]) -> Tuple[Dimension, ...]:
    """Normalize an optional sequence of dimensions, keeping its order."""
    if not items:
        return ()
    return tuple(as_dimension(item) for item in items)


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


@dataclass(frozen=True)
class DataPoint:
    """A single discrete measurement waiting to be sent."""
    metric_name: str
    dimensions: Tuple[Dimension, ...]
    unit: str
    value: float
    timestamp: Optional[datetime] = None
    storage_resolution: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the point for the ingestion API.

        Returns:
            dict: The point with optional fields omitted when unset
        """
        data = {
            'metric_name': self.metric_name,
            'dimensions': [d.to_dict() for d in self.dimensions],
            'unit': self.unit,
            'value': self.value,
        }
        if self.timestamp is not None:
            data['timestamp'] = self.timestamp.isoformat()
        if self.storage_resolution is not None:
            data['storage_resolution'] = self.storage_resolution
        return data


@dataclass(frozen=True)
class StatisticSet:
    """Snapshot of an aggregator."""
    minimum: float
    maximum: float
    sum: float
    sample_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'minimum': self.minimum,
            'maximum': self.maximum,
            'sum': self.sum,
            'sample_count': self.sample_count,
        }


@dataclass(frozen=True)
class StatisticsPoint:
    """An aggregated summary sent in place of many discrete points."""
    metric_name: str
    dimensions: Tuple[Dimension, ...]
    unit: str
    statistics: StatisticSet

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metric_name': self.metric_name,
            'dimensions': [d.to_dict() for d in self.dimensions],
            'unit': self.unit,
            'statistics': self.statistics.to_dict(),
        }


def _ignore_flush_result(error: Optional[BaseException]) -> None:
    pass


@dataclass(frozen=True)
class MetricOptions:
    """
    Per-stream options controlling buffering and dispatch.

    Attributes:
        enabled (bool): When False every write is a no-op and no timers start
        point_flush_interval_ms (int): Interval between discrete point flushes
        summary_flush_interval_ms (int): Interval between summary flushes
        max_batch_capacity (int): Items per batch, clamped to MAX_BATCH_CAPACITY
        include_timestamp (bool): Stamp each point with the current UTC time
        storage_resolution (int, optional): Storage resolution in seconds attached to points
        on_flush_complete (callable): Called once per dispatched batch with an error or None
    """
    enabled: bool = True
    point_flush_interval_ms: int = config.POINT_FLUSH_INTERVAL_MS
    summary_flush_interval_ms: int = config.SUMMARY_FLUSH_INTERVAL_MS
    max_batch_capacity: int = MAX_BATCH_CAPACITY
    include_timestamp: bool = False
    storage_resolution: Optional[int] = None
    on_flush_complete: Callable[[Optional[BaseException]], None] = field(
        default=_ignore_flush_result, compare=False
    )

    def __post_init__(self):
        capacity = max(1, min(MAX_BATCH_CAPACITY, int(self.max_batch_capacity)))
        if capacity != self.max_batch_capacity:
            logger.debug("Clamped max_batch_capacity from %s to %s", self.max_batch_capacity, capacity)
        object.__setattr__(self, 'max_batch_capacity', capacity)
        if self.on_flush_complete is None:
            object.__setattr__(self, 'on_flush_complete', _ignore_flush_result)

    @property
    def point_flush_interval(self) -> float:
        """Point flush interval in seconds."""
        return self.point_flush_interval_ms / 1000.0

    @property
    def summary_flush_interval(self) -> float:
        """Summary flush interval in seconds."""
        return self.summary_flush_interval_ms / 1000.0
