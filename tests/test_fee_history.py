from datetime import datetime, timedelta, timezone

import pytest

from stellaraid.fee_errors import InvalidFeeValueError
from stellaraid.fee_history import FeeHistory, FeeRecord, FeeStats


def _records(*fees):
    return [FeeRecord(fee, "Horizon") for fee in fees]


def test_fee_record_creation():
    record = FeeRecord(100, "Horizon")
    assert record.base_fee_stroops == 100
    assert record.source == "Horizon"
    assert record.age_seconds() >= 0


def test_fee_record_invalid():
    with pytest.raises(InvalidFeeValueError):
        FeeRecord(-100, "Horizon")


def test_fee_record_age_of_old_record():
    stamp = datetime.now(timezone.utc) - timedelta(seconds=120)
    record = FeeRecord(100, "Horizon", timestamp=stamp)
    assert record.age_seconds() >= 120


def test_fee_history_add():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    history.add(110, "Horizon")
    assert len(history) == 2
    assert [r.base_fee_stroops for r in history] == [100, 110]


def test_fee_history_add_negative():
    history = FeeHistory(10)
    with pytest.raises(InvalidFeeValueError):
        history.add(-1, "Horizon")
    assert len(history) == 0


def test_fee_history_latest():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    history.add(150, "Horizon")
    assert history.latest().base_fee_stroops == 150


def test_fee_history_oldest():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    history.add(150, "Horizon")
    assert history.oldest().base_fee_stroops == 100


def test_fee_history_empty_ends():
    history = FeeHistory(10)
    assert history.latest() is None
    assert history.oldest() is None
    assert history.stats() is None


def test_fee_history_capacity_limit():
    history = FeeHistory(3)
    for fee in (100, 110, 120, 130):
        history.add(fee, "Horizon")
    assert len(history) == 3
    assert history.oldest().base_fee_stroops == 110


def test_fee_stats_calculation():
    stats = FeeStats.calculate(_records(100, 150, 200))
    assert stats.min_fee == 100
    assert stats.max_fee == 200
    assert stats.avg_fee == 150.0
    assert stats.median_fee == 150
    assert stats.total_records == 3


def test_fee_stats_median():
    stats = FeeStats.calculate(_records(100, 150, 200, 250))
    assert stats.median_fee == 175


def test_fee_stats_std_dev():
    assert FeeStats.calculate(_records(100, 200)).std_dev == 50.0
    assert FeeStats.calculate(_records(100)).std_dev == 0.0


def test_fee_stats_empty():
    assert FeeStats.calculate([]) is None


def test_fee_history_clear():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    assert len(history) == 1
    history.clear()
    assert len(history) == 0
    assert list(history) == []


def test_fee_history_stats():
    history = FeeHistory(10)
    for fee in (100, 150, 200):
        history.add(fee, "Horizon")
    stats = history.stats()
    assert stats.min_fee == 100
    assert stats.max_fee == 200
    assert stats.total_records == 3


def test_fee_history_within_time_window():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    assert len(history.within_time_window(60)) == 1
    assert history.within_time_window(-1) == []


def test_fee_history_recent_stats():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    history.add(300, "Horizon")
    assert history.recent_stats(60).avg_fee == 200.0
    assert history.recent_stats(-1) is None


def test_fee_history_prune():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    history.prune_older_than(60)
    assert len(history) == 1
    history.prune_older_than(-1)
    assert len(history) == 0


def test_fee_history_prune_keeps_capacity():
    history = FeeHistory(2)
    history.add(100, "Horizon")
    history.prune_older_than(60)
    history.add(110, "Horizon")
    history.add(120, "Horizon")
    assert [r.base_fee_stroops for r in history] == [110, 120]


def test_max_change_percent():
    history = FeeHistory(10)
    history.add(100, "Horizon")
    assert history.max_change_percent(60) is None
    history.add(150, "Horizon")
    assert history.max_change_percent(60) == 50.0


def test_max_change_percent_zero_min():
    history = FeeHistory(10)
    history.add(0, "Horizon")
    history.add(150, "Horizon")
    assert history.max_change_percent(60) is None