"""
Buffered metrics emitter for sending batched data points and summaries to the server.
"""
from .aggregator import Aggregator
from .emitter import EmitterState, MetricEmitter
from .http_client import HttpBackendClient, initialize
from .metrics_buffer import MetricsBuffer
from .models import (
    MAX_BATCH_CAPACITY,
    DataPoint,
    Dimension,
    MetricOptions,
    StatisticSet,
    StatisticsPoint,
)
from .summary_table import SummaryRecord, SummaryTable, make_key
from .timers import RecurringTimer

__all__ = [
    'Aggregator',
    'DataPoint',
    'Dimension',
    'EmitterState',
    'HttpBackendClient',
    'MAX_BATCH_CAPACITY',
    'MetricEmitter',
    'MetricOptions',
    'MetricsBuffer',
    'RecurringTimer',
    'StatisticSet',
    'StatisticsPoint',
    'SummaryRecord',
    'SummaryTable',
    'initialize',
    'make_key',
]
