from __future__ import annotations

from math import isclose

from retirement_backend.core.projection import (
    accumulate,
    invested_capital_at,
    retirement_boundary_wealth,
    wealth_at,
)
from retirement_backend.schemas.projection import ProjectionParameters


def make_params(**overrides) -> ProjectionParameters:
    values = dict(
        current_year=2025,
        last_year=2070,
        monthly_deposit=100.0,
        deposit_growth_rate=0.0,
        market_rate=10.0,
        retirement_start_year=2045,
        retirement_growth_rate=0.0,
        retirement_duration=20,
        initial_capital=1000.0,
    )
    values.update(overrides)
    return ProjectionParameters(**values)


def test_first_year_is_seeded_by_initial_capital():
    params = make_params(initial_capital=2500.0)

    series = accumulate(params)

    assert series.invested_capital[0] == 2500.0
    assert series.wealth[0] == 2500.0


def test_zero_deposit_growth_accumulates_linearly():
    params = make_params(deposit_growth_rate=0.0)

    assert invested_capital_at(params, 5) == 1000.0 + 100.0 * 12 * 5


def test_growing_deposits_use_growing_annuity_sum():
    params = make_params(deposit_growth_rate=10.0)

    # 1200 in the first year, 1320 in the second
    assert isclose(invested_capital_at(params, 2), 1000.0 + 1200.0 * 2.1, rel_tol=1e-12)


def test_wealth_matches_closed_form():
    params = make_params(deposit_growth_rate=0.0, market_rate=10.0)

    # 1000 * 1.1^2 + 1200 * (1 - 1.21) / (0 - 0.1)
    assert isclose(wealth_at(params, 2), 1210.0 + 2520.0, rel_tol=1e-12)


def test_equal_rates_use_limit_formula():
    params = make_params(deposit_growth_rate=10.0, market_rate=10.0)

    # 1000 * 1.1^2 + 1200 * 2 * 1.1^1
    assert isclose(wealth_at(params, 2), 1210.0 + 2640.0, rel_tol=1e-12)


def test_zero_deposit_and_capital_stay_zero():
    params = make_params(monthly_deposit=0.0, initial_capital=0.0, deposit_growth_rate=3.0)

    series = accumulate(params)

    assert all(value == 0.0 for value in series.invested_capital)
    assert all(value == 0.0 for value in series.wealth)


def test_pure_seeding_compounds_at_market_rate():
    params = make_params(monthly_deposit=0.0, initial_capital=5000.0, market_rate=6.1)

    series = accumulate(params)

    for x, wealth in enumerate(series.wealth):
        assert wealth == 5000.0 * (1 + 6.1 / 100.0) ** x


def test_invested_capital_is_non_decreasing():
    params = make_params(monthly_deposit=250.0, deposit_growth_rate=2.5, market_rate=7.0)

    series = accumulate(params)

    assert all(later >= earlier for earlier, later in zip(series.invested_capital, series.invested_capital[1:]))


def test_limit_branch_is_continuous_with_general_formula():
    limit = make_params(monthly_deposit=300.0, deposit_growth_rate=6.1, market_rate=6.1, initial_capital=0.0)
    # 1e-5 apart as fractions, outside the relative tolerance
    general = make_params(monthly_deposit=300.0, deposit_growth_rate=6.101, market_rate=6.1, initial_capital=0.0)

    for x in range(1, 41):
        assert isclose(wealth_at(general, x), wealth_at(limit, x), rel_tol=1e-3)


def test_near_equal_rates_do_not_blow_up():
    params = make_params(deposit_growth_rate=6.1 + 1e-7, market_rate=6.1)
    reference = make_params(deposit_growth_rate=6.1, market_rate=6.1)

    assert isclose(wealth_at(params, 30), wealth_at(reference, 30), rel_tol=1e-6)


def test_series_stops_at_retirement():
    params = make_params(current_year=2025, retirement_start_year=2030, last_year=2060)

    series = accumulate(params)

    assert len(series.wealth) == 6
    assert len(series.invested_capital) == 6


def test_series_clipped_to_horizon_but_boundary_still_computed():
    params = make_params(current_year=2025, retirement_start_year=2040, last_year=2030)

    series = accumulate(params)

    assert len(series.wealth) == 6
    assert retirement_boundary_wealth(params, series) == wealth_at(params, 15)


def test_boundary_wealth_is_the_charted_value():
    params = make_params(deposit_growth_rate=1.0, market_rate=6.1)

    series = accumulate(params)

    assert retirement_boundary_wealth(params, series) is series.wealth[-1]


def test_retirement_before_current_year_gives_empty_series():
    params = make_params(current_year=2030, retirement_start_year=2025)

    series = accumulate(params)

    assert series.wealth == []
    assert series.invested_capital == []
    assert retirement_boundary_wealth(params, series) is None
