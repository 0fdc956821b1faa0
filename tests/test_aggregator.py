import math

from metrics_emitter import Aggregator, StatisticSet


def test_put_tracks_min_max_sum_count():
    aggregator = Aggregator()
    for value in (12, 13, 7):
        aggregator.put(value)

    assert aggregator.peek() == StatisticSet(minimum=7, maximum=13, sum=32, sample_count=3)
    assert aggregator.size == 3


def test_peek_does_not_reset():
    aggregator = Aggregator()
    aggregator.put(5)

    first = aggregator.peek()
    second = aggregator.peek()

    assert first == second
    assert aggregator.size == 1


def test_get_returns_snapshot_and_resets():
    aggregator = Aggregator()
    aggregator.put(12)
    aggregator.put(13)

    assert aggregator.get() == StatisticSet(minimum=12, maximum=13, sum=25, sample_count=2)
    assert aggregator.size == 0
    assert aggregator.peek() == StatisticSet(
        minimum=float('inf'), maximum=float('-inf'), sum=0, sample_count=0
    )


def test_custom_sentinels_are_restored_on_reset():
    aggregator = Aggregator(min_sentinel=0, max_sentinel=0)
    aggregator.put(-3)
    aggregator.reset()

    stats = aggregator.peek()
    assert stats.minimum == 0
    assert stats.maximum == 0
    assert len(aggregator) == 0


def test_nan_flows_through_sum():
    """Values are not validated, NaN propagates into the statistics."""
    aggregator = Aggregator()
    aggregator.put(1)
    aggregator.put(float('nan'))

    stats = aggregator.get()
    assert math.isnan(stats.sum)
    assert stats.sample_count == 2
