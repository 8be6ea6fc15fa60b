"""Unit tests for the aggregation logic."""

from __future__ import annotations

from models.records import DailyStat, MonthlyStat, PeriodStat, Reading
from services.aggregator import Aggregator


def _reading(date_key: str, frequency: float) -> Reading:
    """Helper to build deterministic readings."""

    return Reading(date_key=date_key, frequency=frequency)


def test_daily_groups_by_exact_date() -> None:
    aggregator = Aggregator()

    stats = aggregator.daily([_reading("2023-01-01", 5.0), _reading("2023-01-01", 9.0)])

    assert stats == [DailyStat(date="2023-01-01", min=5.0, max=9.0, count=2)]


def test_daily_sorts_newest_first() -> None:
    aggregator = Aggregator()
    readings = [
        _reading("2023-01-02", 1.0),
        _reading("2023-02-01", 2.0),
        _reading("2022-12-31", 3.0),
    ]

    assert [stat.date for stat in aggregator.daily(readings)] == [
        "2023-02-01",
        "2023-01-02",
        "2022-12-31",
    ]


def test_monthly_combines_member_days() -> None:
    aggregator = Aggregator()
    readings = [
        _reading("2023-01-01", 5.0),
        _reading("2023-01-01", 9.0),
        _reading("2023-01-31", 2.0),
        _reading("2023-01-31", 7.0),
        _reading("2023-02-01", 11.0),
    ]

    months = aggregator.monthly_from_readings(readings)

    assert months == [
        MonthlyStat(month="2023-02", min=11.0, max=11.0, count=1),
        MonthlyStat(month="2023-01", min=2.0, max=9.0, count=4),
    ]


def test_monthly_skips_empty_days() -> None:
    aggregator = Aggregator()
    daily = [DailyStat(date="2023-03-01", min=0.0, max=0.0, count=0)]

    assert aggregator.monthly(daily) == []


def test_aggregation_is_repeatable() -> None:
    aggregator = Aggregator()
    readings = (_reading("2023-01-01", 4.0), _reading("2023-01-05", 6.0))

    assert aggregator.daily(readings) == aggregator.daily(readings)
    assert aggregator.monthly_from_readings(readings) == aggregator.monthly_from_readings(readings)


def test_period_matches_exact_day_or_month() -> None:
    aggregator = Aggregator()
    readings = [
        _reading("2023-01-01", 5.0),
        _reading("2023-01-15", 9.0),
        _reading("2023-02-01", 1.0),
    ]

    assert aggregator.period(readings, "2023-01-15") == PeriodStat(
        period="2023-01-15", min=9.0, max=9.0, count=1
    )
    assert aggregator.period(readings, "2023-01") == PeriodStat(
        period="2023-01", min=5.0, max=9.0, count=2
    )


def test_period_without_matches_is_empty_not_an_error() -> None:
    stat = Aggregator().period([_reading("2023-01-01", 5.0)], "2023-03")

    assert stat == PeriodStat(period="2023-03", min=None, max=None, count=0)
    assert stat.is_empty


def test_filter_daily_uses_substring_match() -> None:
    aggregator = Aggregator()
    stats = aggregator.daily([_reading("2023-01-01", 1.0), _reading("2023-02-01", 2.0)])

    assert [s.date for s in aggregator.filter_daily(stats, "2023-02")] == ["2023-02-01"]
    assert len(aggregator.filter_daily(stats, "  ")) == 2
