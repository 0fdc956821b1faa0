"""
Buffer for discrete data points awaiting dispatch.
"""
from typing import List

from .models import DataPoint


class MetricsBuffer:
    """Append-only, order-preserving list of pending data points."""

    def __init__(self):
        self.buffer: List[DataPoint] = []

    def append(self, point: DataPoint) -> int:
        """
        Add a point to the end of the buffer.

        Args:
            point (DataPoint): The point to buffer

        Returns:
            int: The new number of buffered points
        """
        self.buffer.append(point)
        return len(self.buffer)

    def drain(self) -> List[DataPoint]:
        """
        Swap in an empty buffer and return the previous contents.

        Callers must hold the owning emitter's lock.

        Returns:
            list: All buffered points in write order
        """
        points = self.buffer
        self.buffer = []
        return points

    def __len__(self) -> int:
        return len(self.buffer)
