"""
Keyed running summaries, one aggregator per metric identity.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Tuple

from .aggregator import Aggregator
from .models import Dimension, StatisticSet


def make_key(metric_name: str, unit: str, dimensions: Iterable[Dimension]) -> str:
    """
    Build the identity key for a summary.

    Dimension order is part of the identity, so [A, B] and [B, A] are tracked
    independently. Assumes no NUL characters in names, units or values.

    Args:
        metric_name (str): Name of the metric
        unit (str): Unit of the metric
        dimensions (iterable): Dimensions in write order

    Returns:
        str: A key usable in a dict
    """
    key = f"{metric_name}\0{unit}"
    for dimension in dimensions:
        key += f"\0{dimension.name}\0{dimension.value}"
    return key


@dataclass
class SummaryRecord:
    metric_name: str
    unit: str
    dimensions: Tuple[Dimension, ...]
    aggregator: Aggregator = field(default_factory=Aggregator)


class SummaryTable:
    """
    Mapping from identity key to SummaryRecord, created lazily on first write.

    Records are never removed; draining resets their aggregators in place.
    """

    def __init__(self):
        self.records: Dict[str, SummaryRecord] = {}

    def write_value(
        self,
        identity: str,
        metric_name: str,
        unit: str,
        dimensions: Tuple[Dimension, ...],
        value: float
    ) -> SummaryRecord:
        """
        Add a value to the record for an identity, creating it if needed.

        Args:
            identity (str): Key from make_key
            metric_name (str): Name of the metric
            unit (str): Unit of the metric
            dimensions (tuple): Dimensions to report, only used on first write
            value (float): The value to aggregate

        Returns:
            SummaryRecord: The record the value went into
        """
        record = self.records.get(identity)
        if record is None:
            record = SummaryRecord(metric_name=metric_name, unit=unit, dimensions=dimensions)
            self.records[identity] = record
        record.aggregator.put(value)
        return record

    def drain_all(self) -> List[Tuple[str, str, Tuple[Dimension, ...], StatisticSet]]:
        """
        Collect and reset the statistics of every record holding data.

        Returns:
            list: (metric_name, unit, dimensions, statistics) in first-write order
        """
        drained = []
        for record in self.records.values():
            if not record.aggregator.size:
                continue
            drained.append((record.metric_name, record.unit, record.dimensions, record.aggregator.get()))
        return drained

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SummaryRecord]:
        return iter(self.records.values())
