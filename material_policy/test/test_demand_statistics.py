"""
Tests for monthly demand bucketing and variability
"""
import math
from collections import namedtuple
from datetime import date, datetime

import pytest

from material_policy.buisness.policy.demand_statistics import DemandStatistics, month_keys, window_start

Movement = namedtuple('Movement', 'movement_type quantity movement_date')

AS_OF = date(2024, 3, 15)


def issue(year, month, quantity, day=10):
    return Movement('ISSUE', quantity, datetime(year, month, day))


def test_window_is_twelve_calendar_months_ending_this_month():
    keys = month_keys(AS_OF)

    assert len(keys) == 12
    assert keys[0] == '2023-04'
    assert keys[-1] == '2024-03'
    assert window_start(AS_OF) == datetime(2023, 4, 1)


def test_window_crosses_year_boundary_in_january():
    keys = month_keys(date(2024, 1, 31))

    assert keys[0] == '2023-02'
    assert keys[-2] == '2023-12'
    assert keys[-1] == '2024-01'


def test_empty_history_is_zero_not_nan():
    stats = DemandStatistics.compute([], as_of=AS_OF)

    assert stats.buckets == (0.0,) * 12
    assert stats.monthly_mean == 0
    assert stats.cv == 0
    assert not math.isnan(stats.cv)
    assert stats.estimated_annual_usage == 0


def test_all_zero_issues_are_zero_not_nan():
    events = [issue(2024, m, 0) for m in (1, 2, 3)]

    stats = DemandStatistics.compute(events, as_of=AS_OF)

    assert stats.monthly_mean == 0
    assert stats.cv == 0


def test_constant_demand_has_no_variability():
    events = [issue(2023, m, 5) for m in range(4, 13)] + [issue(2024, m, 5) for m in (1, 2, 3)]

    stats = DemandStatistics.compute(events, as_of=AS_OF)

    assert stats.monthly_mean == pytest.approx(5)
    assert stats.std_dev == pytest.approx(0)
    assert stats.cv == pytest.approx(0)
    assert stats.estimated_annual_usage == 60


def test_population_standard_deviation_over_twelve_buckets():
    events = [
        issue(2023, 4, 2),
        issue(2024, 3, 6),
        issue(2024, 3, 4, day=20),
    ]

    stats = DemandStatistics.compute(events, as_of=AS_OF)

    assert stats.buckets[0] == 2
    assert stats.buckets[-1] == 10
    assert sum(stats.buckets[1:-1]) == 0
    assert stats.monthly_mean == pytest.approx(1.0)
    # squared deviations: 1 + 10 * 1 + 81 = 92, divided by 12 (not 11)
    assert stats.std_dev == pytest.approx(math.sqrt(92 / 12))
    assert stats.cv == pytest.approx(math.sqrt(92 / 12))


def test_receipts_adjustments_and_out_of_window_issues_are_ignored():
    events = [
        Movement('RECEIPT', 100, datetime(2024, 3, 1)),
        Movement('ADJUSTMENT', 7, datetime(2024, 2, 1)),
        issue(2023, 3, 50),
        issue(2024, 4, 50),
        issue(2024, 2, 12),
    ]

    stats = DemandStatistics.compute(events, as_of=AS_OF)

    assert sum(stats.buckets) == 12
    assert stats.estimated_annual_usage == 12
