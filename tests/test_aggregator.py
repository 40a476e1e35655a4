"""Unit tests for the aggregation logic."""

from __future__ import annotations

import random
from datetime import date, datetime, timezone

from models.periods import DayPeriod, MonthPeriod
from models.records import Reading
from services.aggregator import Aggregator, MetricAggregate, locate_bucket
from services.planner import BucketPlanner

DAY = date(2024, 3, 10)
MIDNIGHT = int(datetime(2024, 3, 10, tzinfo=timezone.utc).timestamp())
HOUR = 3600


def _day_buckets():
    return BucketPlanner().plan(DayPeriod(DAY))


def _reading(
    offset: int,
    sensor_id: str = "sensor-a",
    temperature: float | None = None,
    humidity: float | None = None,
) -> Reading:
    """Helper to build readings relative to midnight of the test day."""

    return Reading(
        timestamp=MIDNIGHT + offset,
        sensor_id=sensor_id,
        temperature=temperature,
        humidity=humidity,
    )


def test_aggregate_without_readings_returns_empty_mapping() -> None:
    aggregator = Aggregator()

    assert aggregator.aggregate(_day_buckets(), []) == {}


def test_pre_registered_sensor_gets_all_null_series() -> None:
    aggregator = Aggregator()

    result = aggregator.aggregate(_day_buckets(), [], sensor_ids=["sensor-a"])

    assert list(result) == ["sensor-a"]
    assert len(result["sensor-a"]) == 24
    assert all(item.temperature == MetricAggregate() for item in result["sensor-a"])
    assert all(item.humidity == MetricAggregate() for item in result["sensor-a"])


def test_single_reading_sets_avg_min_max_to_its_value() -> None:
    aggregator = Aggregator()

    result = aggregator.aggregate(
        _day_buckets(), [_reading(5 * HOUR + 120, temperature=20.0, humidity=40.0)]
    )

    series = result["sensor-a"]
    assert series[5].temperature == MetricAggregate(avg=20.0, min=20.0, max=20.0)
    assert series[5].humidity == MetricAggregate(avg=40.0, min=40.0, max=40.0)
    assert all(item.temperature.avg is None for index, item in enumerate(series) if index != 5)


def test_aggregate_computes_statistics_per_bucket() -> None:
    aggregator = Aggregator()
    readings = [
        _reading(HOUR + 10, temperature=10.0),
        _reading(HOUR + 20, temperature=30.0),
        _reading(HOUR + 30, temperature=20.0),
        _reading(2 * HOUR, temperature=5.0),
    ]

    series = aggregator.aggregate(_day_buckets(), readings)["sensor-a"]

    assert series[1].temperature == MetricAggregate(avg=20.0, min=10.0, max=30.0)
    assert series[2].temperature == MetricAggregate(avg=5.0, min=5.0, max=5.0)


def test_absent_values_never_count_as_zero() -> None:
    aggregator = Aggregator()
    readings = [
        _reading(60, temperature=None, humidity=55.0),
        _reading(HOUR + 60, temperature=21.0, humidity=None),
        _reading(HOUR + 120, temperature=None, humidity=None),
        _reading(HOUR + 180, temperature=23.0, humidity=float("nan")),
    ]

    series = aggregator.aggregate(_day_buckets(), readings)["sensor-a"]

    assert series[0].temperature == MetricAggregate()
    assert series[0].humidity == MetricAggregate(avg=55.0, min=55.0, max=55.0)
    assert series[1].temperature == MetricAggregate(avg=22.0, min=21.0, max=23.0)
    assert series[1].humidity == MetricAggregate()


def test_bucket_boundaries_are_half_open() -> None:
    aggregator = Aggregator()
    readings = [
        _reading(HOUR - 1, temperature=1.0),
        _reading(HOUR, temperature=2.0),
    ]

    series = aggregator.aggregate(_day_buckets(), readings)["sensor-a"]

    assert series[0].temperature.avg == 1.0
    assert series[1].temperature.avg == 2.0


def test_out_of_range_readings_are_discarded_but_sensor_is_listed() -> None:
    aggregator = Aggregator()
    readings = [
        _reading(-1, sensor_id="early", temperature=1.0),
        _reading(24 * HOUR, sensor_id="late", temperature=2.0),
        _reading(0, sensor_id="inside", temperature=3.0),
    ]

    result = aggregator.aggregate(_day_buckets(), readings)

    assert list(result) == ["early", "late", "inside"]
    assert all(item.temperature.avg is None for item in result["early"])
    assert all(item.temperature.avg is None for item in result["late"])
    assert result["inside"][0].temperature.avg == 3.0


def test_sensor_order_puts_registered_sensors_first() -> None:
    aggregator = Aggregator()
    readings = [_reading(0, sensor_id="b", temperature=1.0), _reading(0, sensor_id="a", temperature=1.0)]

    result = aggregator.aggregate(_day_buckets(), readings, sensor_ids=["z", "a"])

    assert list(result) == ["z", "a", "b"]


def test_unsorted_readings_match_sorted_readings() -> None:
    aggregator = Aggregator()
    rng = random.Random(7)
    readings = [
        _reading(rng.randrange(0, 24 * HOUR), temperature=rng.uniform(-10, 40))
        for _ in range(200)
    ]

    shuffled = list(readings)
    rng.shuffle(shuffled)
    ordered = sorted(readings, key=lambda reading: reading.timestamp)

    shuffled_result = aggregator.aggregate(_day_buckets(), shuffled)["sensor-a"]
    ordered_result = aggregator.aggregate(_day_buckets(), ordered)["sensor-a"]
    for left, right in zip(shuffled_result, ordered_result):
        assert left.temperature.min == right.temperature.min
        assert left.temperature.max == right.temperature.max
        assert left.temperature.avg is None or abs(left.temperature.avg - right.temperature.avg) < 1e-9


def test_min_avg_max_ordering_holds_for_random_readings() -> None:
    aggregator = Aggregator()
    buckets = BucketPlanner().plan(MonthPeriod(2024, 2))
    rng = random.Random(1234)
    span_start, span_end = buckets[0].start, buckets[-1].end
    readings = [
        Reading(
            timestamp=rng.randrange(span_start - 86400, span_end + 86400),
            sensor_id=rng.choice(["s1", "s2", "s3"]),
            temperature=rng.choice([None, rng.uniform(-20, 45), 0.1]),
            humidity=rng.choice([None, rng.uniform(0, 100)]),
        )
        for _ in range(2000)
    ]

    result = aggregator.aggregate(buckets, readings)

    for series in result.values():
        assert len(series) == len(buckets)
        for item in series:
            for metric in (item.temperature, item.humidity):
                if metric.avg is None:
                    assert metric.min is None and metric.max is None
                else:
                    assert metric.min <= metric.avg <= metric.max


def test_average_of_identical_values_stays_within_extremes() -> None:
    aggregator = Aggregator()
    readings = [_reading(10 * index, temperature=0.1) for index in range(3)]

    metric = aggregator.aggregate(_day_buckets(), readings)["sensor-a"][0].temperature

    assert metric.min == metric.avg == metric.max == 0.1


def test_aggregation_is_idempotent() -> None:
    aggregator = Aggregator()
    rng = random.Random(99)
    readings = [
        _reading(rng.randrange(0, 24 * HOUR), sensor_id=rng.choice("abc"), temperature=rng.uniform(0, 30))
        for _ in range(300)
    ]
    buckets = _day_buckets()

    assert aggregator.aggregate(buckets, readings) == aggregator.aggregate(buckets, readings)


def test_every_in_range_reading_is_assigned_exactly_once() -> None:
    aggregator = Aggregator()
    buckets = _day_buckets()
    rng = random.Random(3)
    readings = [_reading(rng.randrange(-HOUR, 25 * HOUR)) for _ in range(500)]

    counts = aggregator.count_assigned(buckets, readings)

    in_range = sum(1 for reading in readings if buckets[0].start <= reading.timestamp < buckets[-1].end)
    assert sum(counts) == in_range
    for bucket, count in zip(buckets, counts):
        assert count == sum(1 for reading in readings if bucket.contains(reading.timestamp))


def test_locate_bucket_edges() -> None:
    starts = [0, 10, 20]

    assert locate_bucket(starts, 30, -1) is None
    assert locate_bucket(starts, 30, 0) == 0
    assert locate_bucket(starts, 30, 19) == 1
    assert locate_bucket(starts, 30, 29) == 2
    assert locate_bucket(starts, 30, 30) is None
    assert locate_bucket([], 0, 5) is None
