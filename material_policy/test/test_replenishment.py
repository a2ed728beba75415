"""
Tests for stocking level recommendations and capital impact
"""
import pytest

from material_policy.buisness.policy.capital_impact import average_inventory, capital_impact
from material_policy.buisness.policy.replenishment import (
    MISSING_ANNUAL_USAGE,
    MISSING_LEAD_TIME,
    PolicyUnavailable,
    ReplenishmentCalculator,
    ReplenishmentParameters,
    canonical_min_stock,
    ceil_quantity,
)


def test_class_c_example():
    result = ReplenishmentCalculator.calculate('C', 3650, 10, cv=0.3)

    assert isinstance(result, ReplenishmentParameters)
    assert result.daily_usage == pytest.approx(10)
    assert result.lead_time_demand == pytest.approx(100)
    assert result.total_safety_factor == pytest.approx(0.55)
    assert result.target_days_supply == 30
    assert result.safety_stock == 55
    assert result.reorder_point == 155
    assert result.max_stock == 455
    assert result.min_stock == 55


def test_class_a_stable_demand():
    result = ReplenishmentCalculator.calculate('A', 365, 20, cv=0)

    assert result.safety_stock == 15
    assert result.reorder_point == 35
    assert result.max_stock == 125


def test_variability_adds_to_class_factor():
    stable_a = ReplenishmentCalculator.calculate('A', 3650, 10, cv=0.0)
    volatile_d = ReplenishmentCalculator.calculate('D', 3650, 10, cv=0.65)

    assert stable_a.safety_stock == volatile_d.safety_stock == 75


def test_target_days_override():
    result = ReplenishmentCalculator.calculate('C', 3650, 10, cv=0.3, target_days_override=10)

    assert result.target_days_supply == 10
    assert result.max_stock == 255


def test_non_positive_override_falls_back_to_class_default():
    result = ReplenishmentCalculator.calculate('B', 3650, 10, target_days_override=0)

    assert result.target_days_supply == 60


def test_unknown_class_uses_d_policy():
    result = ReplenishmentCalculator.calculate('Z', 3650, 10)

    assert result.criticality_class == 'D'
    assert result.base_safety_factor == 0.10
    assert result.target_days_supply == 14


@pytest.mark.parametrize('annual_usage', [None, 0, -5])
def test_missing_annual_usage_is_unavailable(annual_usage):
    result = ReplenishmentCalculator.calculate('A', annual_usage, 10)

    assert isinstance(result, PolicyUnavailable)
    assert result.missing == MISSING_ANNUAL_USAGE
    assert result.available is False


@pytest.mark.parametrize('lead_time', [None, 0, -1])
def test_missing_lead_time_is_unavailable(lead_time):
    result = ReplenishmentCalculator.calculate('A', 3650, lead_time)

    assert isinstance(result, PolicyUnavailable)
    assert result.missing == MISSING_LEAD_TIME


def test_float_noise_does_not_add_a_unit():
    assert ceil_quantity(100 * 0.55) == 55
    assert ceil_quantity(55.0001) == 56


def test_min_stock_is_safety_stock():
    assert canonical_min_stock(42) == 42


def test_average_inventory_clamps_negative_cycle():
    assert average_inventory(10, 20, 40) == 10
    assert average_inventory(None, None, None) == 0


def test_capital_impact():
    old = {'safety_stock_qty': 10, 'max_stock_level': 50, 'reorder_point_qty': 20}
    new = {'safety_stock_qty': 20, 'max_stock_level': 80, 'reorder_point_qty': 40}

    # old average 10 + 15 = 25, new average 20 + 20 = 40
    assert capital_impact(old, new, 2.0) == pytest.approx(30.0)
    assert capital_impact(new, old, 2.0) == pytest.approx(-30.0)
    assert capital_impact(old, new, None) == 0
