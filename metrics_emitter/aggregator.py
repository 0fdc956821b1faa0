"""
Aggregates an unordered sequence of values into min, max, sum and count.
"""
from .models import StatisticSet


class Aggregator:
    """
    Running statistics for a single metric identity.

    Values are not validated; a NaN or infinite value flows through the
    arithmetic unchanged and the backend decides what to do with it.
    """

    def __init__(self, min_sentinel: float = float('inf'), max_sentinel: float = float('-inf')):
        """
        Initialize the aggregator.

        Args:
            min_sentinel (float): Minimum reported before any value is put
            max_sentinel (float): Maximum reported before any value is put
        """
        self._min_sentinel = min_sentinel
        self._max_sentinel = max_sentinel
        self.reset()

    def put(self, value: float) -> None:
        """
        Add a value to the running statistics.

        Args:
            value (float): The value to include
        """
        self._sum += value
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        self._count += 1

    @property
    def size(self) -> int:
        """Number of values put since the last reset."""
        return self._count

    def __len__(self) -> int:
        return self._count

    def peek(self) -> StatisticSet:
        """
        Get the current statistics without resetting them.

        Returns:
            StatisticSet: The minimum, maximum, sum and sample count
        """
        return StatisticSet(
            minimum=self._min,
            maximum=self._max,
            sum=self._sum,
            sample_count=self._count,
        )

    def get(self) -> StatisticSet:
        """
        Get the current statistics and reset them.

        Returns:
            StatisticSet: The minimum, maximum, sum and sample count
        """
        result = self.peek()
        self.reset()
        return result

    def reset(self) -> None:
        """Reset the statistics to the sentinels."""
        self._min = self._min_sentinel
        self._max = self._max_sentinel
        self._sum = 0
        self._count = 0
