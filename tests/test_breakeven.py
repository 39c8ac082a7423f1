import dataclasses
import pytest
from safcore.breakeven import (
    PARTNERSHIP_STRUCTURES, breakeven_months, breakeven_price, monthly_cumulative, monthly_profit,
    operator_capital,
)
from safcore.finance import compute_scenario
from safcore.scenarios import get_scenario


@pytest.fixture
def realistic():
    return get_scenario('languedoc', 'realiste')


@pytest.fixture
def optimistic():
    return get_scenario('languedoc', 'optimiste')


@pytest.fixture
def jv():
    return PARTNERSHIP_STRUCTURES['joint-venture']


def test_structures_split_to_100():
    for s in PARTNERSHIP_STRUCTURES.values():
        assert sum(s.capital_split.values()) == 100
        assert sum(s.revenue_share.values()) == 100


def test_operator_capital_follows_scenario_capex(realistic, jv):
    assert operator_capital(realistic, jv) == pytest.approx(33_250_000)
    bigger = dataclasses.replace(realistic, capex_initial=190_000_000)
    assert operator_capital(bigger, jv) == pytest.approx(66_500_000)


def test_monthly_profit_by_hand(realistic, jv):
    margin = 25_804_800 - 80_000 * 40 - 16_128_000 * 0.75
    assert monthly_profit(realistic, jv) == pytest.approx((margin * 0.45 - 3_200_000) / 12)


def test_variable_costs_are_shared_with_revenue(realistic):
    # a larger revenue share means a larger share of the costs too
    coop = PARTNERSHIP_STRUCTURES['cooperative']
    private = PARTNERSHIP_STRUCTURES['private-led']
    margin = 25_804_800 - 3_200_000 - 12_096_000
    assert monthly_profit(realistic, coop) * 12 + coop.fixed_costs == pytest.approx(margin * 0.65)
    assert monthly_profit(realistic, private) * 12 + private.fixed_costs == pytest.approx(margin * 0.30)


def test_never_breaks_even_when_losing(realistic, jv):
    losing = dataclasses.replace(realistic, saf_price=0.5)
    assert monthly_profit(losing, jv) < 0
    assert breakeven_months(losing, jv) is None


def test_slow_payback_beyond_horizon(realistic, jv):
    assert monthly_profit(realistic, jv) > 0
    assert breakeven_months(realistic, jv) is None


@pytest.mark.parametrize('structure_id, month', [
    ('joint-venture', 75),
    ('private-led', 99),
    ('cooperative', 79),
    ('concession', 100),
])
def test_optimistic_preset_breaks_even_under_every_structure(optimistic, structure_id, month):
    structure = PARTNERSHIP_STRUCTURES[structure_id]
    curve = monthly_cumulative(optimistic, structure, months=120)
    assert breakeven_months(optimistic, structure) == month
    assert curve[month - 2] < 0 <= curve[month - 1]


def test_monthly_cumulative_curve(realistic, jv):
    curve = monthly_cumulative(realistic, jv, months=24)
    profit = monthly_profit(realistic, jv)
    assert len(curve) == 24
    assert curve[0] == pytest.approx(-33_250_000 + profit)
    assert curve[-1] == pytest.approx(-33_250_000 + 24 * profit)


def test_breakeven_price_zeroes_npv(realistic):
    price = breakeven_price(realistic)
    assert realistic.opex_per_liter < price < realistic.saf_price
    assert compute_scenario(dataclasses.replace(realistic, saf_price=price)).npv == pytest.approx(0, abs=1e-3)
