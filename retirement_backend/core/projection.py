from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

from retirement_backend.schemas.projection import (
    AccumulationSeries,
    ProjectionParameters,
    ProjectionPoint,
    ProjectionSeries,
)

logger = logging.getLogger(__name__)

# below this a deposit growth rate is treated as zero
ZERO_RATE_EPSILON = 1e-9
# relative tolerance for deposit growth == market rate
ACCUMULATION_TOLERANCE = 1e-4
# absolute tolerance on the annuity spread and its discount factor
ANNUITY_TOLERANCE = 1e-4


def _fraction(percent: float) -> float:
    return percent / 100.0


def _power(base: float, exponent: int) -> float:
    """base ** exponent, saturating to infinity instead of raising."""
    try:
        return base ** exponent
    except OverflowError:
        return math.copysign(math.inf, base) if exponent % 2 else math.inf
    except ZeroDivisionError:
        return math.inf


def _growth_ratio(growth: float, market: float) -> float:
    """(1 + growth) / (1 + market) for fractional rates."""
    if 1.0 + market == 0.0:
        return math.inf
    return (1.0 + growth) / (1.0 + market)


def _rates_coincide(deposit_growth: float, market: float) -> bool:
    return math.isclose(
        deposit_growth,
        market,
        rel_tol=ACCUMULATION_TOLERANCE,
        abs_tol=ZERO_RATE_EPSILON,
    )


# ------------------------------------------------
# Accumulation
# ------------------------------------------------


def invested_capital_at(params: ProjectionParameters, elapsed: int) -> float:
    """Nominal contributions through `elapsed` years, no market growth."""
    if elapsed == 0:
        return params.initial_capital

    g = _fraction(params.deposit_growth_rate)
    yearly_deposit = params.monthly_deposit * 12

    if abs(g) < ZERO_RATE_EPSILON:
        contributions = yearly_deposit * elapsed
    else:
        contributions = yearly_deposit * (_power(1 + g, elapsed) - 1) / g

    return params.initial_capital + contributions


def wealth_at(params: ProjectionParameters, elapsed: int) -> float:
    """
    Compounded account value after `elapsed` years.

    The initial capital grows at the market rate; the deposit stream grows at
    its own rate and compounds at the market rate (growing-annuity future
    value). When both rates coincide the closed form divides by ~0, so the
    limit x * (1 + g)^(x - 1) replaces the quotient.
    """
    if elapsed == 0:
        return params.initial_capital

    g = _fraction(params.deposit_growth_rate)
    r = _fraction(params.market_rate)
    yearly_deposit = params.monthly_deposit * 12

    grown_capital = params.initial_capital * _power(1 + r, elapsed)

    if _rates_coincide(g, r):
        return grown_capital + yearly_deposit * elapsed * _power(1 + g, elapsed - 1)

    deposits = yearly_deposit * (_power(1 + g, elapsed) - _power(1 + r, elapsed)) / (g - r)
    return grown_capital + deposits


def accumulate(params: ProjectionParameters) -> AccumulationSeries:
    """Invested capital and wealth for current_year..min(retirement, last_year)."""
    if params.retirement_start_year < params.current_year or params.last_year < params.current_year:
        return AccumulationSeries()

    end_year = min(params.retirement_start_year, params.last_year)
    series = AccumulationSeries()
    for elapsed in range(end_year - params.current_year + 1):
        series.invested_capital.append(invested_capital_at(params, elapsed))
        series.wealth.append(wealth_at(params, elapsed))
    return series


def retirement_boundary_wealth(
    params: ProjectionParameters,
    accumulation: Optional[AccumulationSeries] = None,
) -> Optional[float]:
    """
    Wealth at retirement_start_year.

    Taken from the accumulation series when it reaches retirement, so the
    charted value and the value seeding the payout phase are the same float.
    Retirement beyond the horizon falls back to the same wealth formula.
    """
    elapsed = params.retirement_start_year - params.current_year
    if elapsed < 0:
        return None
    if accumulation is not None and len(accumulation.wealth) == elapsed + 1:
        return accumulation.wealth[elapsed]
    return wealth_at(params, elapsed)


# ------------------------------------------------
# Annuitization + decumulation
# ------------------------------------------------


def annuitize(
    wealth_at_retirement: float,
    retirement_growth_rate: float,
    market_rate: float,
    retirement_duration: int,
) -> float:
    """
    Scale constant C of a growing annuity that exhausts `wealth_at_retirement`
    after `retirement_duration` years.

    Rates are percents. A collapsed discount factor means a flat schedule and
    C is the wealth itself.
    """
    g = _fraction(retirement_growth_rate)
    r = _fraction(market_rate)

    numerator = g - r
    denominator = _power(_growth_ratio(g, r), retirement_duration) - 1

    if abs(denominator) < ANNUITY_TOLERANCE:
        return wealth_at_retirement
    return wealth_at_retirement * numerator / denominator


def remaining_pension_at(
    params: ProjectionParameters,
    wealth_at_retirement: float,
    scale: float,
    years_since_retirement: int,
) -> float:
    if years_since_retirement == 0:
        return wealth_at_retirement

    g = _fraction(params.retirement_growth_rate)
    r = _fraction(params.market_rate)
    years_left = params.retirement_duration - years_since_retirement

    factor1 = _power(1 + g, years_since_retirement)
    factor2 = _power(_growth_ratio(g, r), years_left) - 1

    if abs(g - r) < ANNUITY_TOLERANCE or abs(factor2) < ANNUITY_TOLERANCE:
        # linear decay to zero at the end of the window
        return scale * years_left
    return scale * factor1 * factor2 / (g - r)


def decumulate(
    params: ProjectionParameters,
    wealth_at_retirement: float,
    scale: float,
) -> List[float]:
    """Remaining pension for retirement_start_year..start + duration, clipped to the horizon."""
    if params.retirement_duration < 0 or params.retirement_start_year < params.current_year:
        return []

    end_year = min(
        params.retirement_start_year + params.retirement_duration,
        params.last_year,
    )
    return [
        remaining_pension_at(params, wealth_at_retirement, scale, year - params.retirement_start_year)
        for year in range(params.retirement_start_year, end_year + 1)
    ]


def expected_monthly_pension(
    wealth_at_retirement: float,
    retirement_growth_rate: float,
    market_rate: float,
    retirement_duration: int,
) -> float:
    """
    Normalized monthly payout.

    Keeps the dashboard's convention of dividing by 12 twice (first per
    month of the duration, then once more); see DESIGN.md before changing it.
    """
    if retirement_duration <= 0:
        return 0.0

    g = _fraction(retirement_growth_rate)
    r = _fraction(market_rate)

    if abs(g - r) < ANNUITY_TOLERANCE:
        adjusted_total = wealth_at_retirement * retirement_duration
    else:
        discount = _power(_growth_ratio(g, r), retirement_duration) - 1
        adjusted_total = wealth_at_retirement * discount / (g - r)

    return adjusted_total / (retirement_duration * 12) / 12


# ------------------------------------------------
# Full projection
# ------------------------------------------------


def project(params: ProjectionParameters) -> ProjectionSeries:
    """
    Run accumulation -> annuitization -> decumulation and assemble one point
    per year in [current_year, last_year].

    Invalid combinations (retirement before current_year, negative duration)
    give points with every value None; an empty horizon gives no points.
    """
    years = range(params.current_year, params.last_year + 1)
    if not years:
        return ProjectionSeries()

    if params.retirement_start_year < params.current_year or params.retirement_duration < 0:
        logger.debug("degenerate projection parameters: %s", params)
        return ProjectionSeries(points=tuple(ProjectionPoint(year=year) for year in years))

    accumulation = accumulate(params)
    wealth_at_retirement = retirement_boundary_wealth(params, accumulation)
    scale = annuitize(
        wealth_at_retirement,
        params.retirement_growth_rate,
        params.market_rate,
        params.retirement_duration,
    )
    pension = decumulate(params, wealth_at_retirement, scale)

    points: List[ProjectionPoint] = []
    for offset, year in enumerate(years):
        invested = wealth = remaining = None
        if offset < len(accumulation.wealth):
            invested = accumulation.invested_capital[offset]
            wealth = accumulation.wealth[offset]
        pension_index = year - params.retirement_start_year
        if 0 <= pension_index < len(pension):
            remaining = pension[pension_index]
        points.append(
            ProjectionPoint(year=year, invested_capital=invested, wealth=wealth, remaining_pension=remaining)
        )

    monthly = expected_monthly_pension(
        wealth_at_retirement,
        params.retirement_growth_rate,
        params.market_rate,
        params.retirement_duration,
    )
    logger.debug(
        "projected %d years, retirement wealth %.2f, monthly pension %.2f",
        len(points),
        wealth_at_retirement,
        monthly,
    )
    return ProjectionSeries(
        points=tuple(points),
        retirement_wealth=wealth_at_retirement,
        expected_monthly_pension=monthly,
    )


# Parameters and series are frozen, so cached series can be shared between callers.
project_cached = lru_cache(maxsize=256)(project)


def series_bounds(values: Iterable[Optional[float]]) -> Optional[Tuple[float, float]]:
    """Min/max for axis scaling, ignoring None, NaN and infinities."""
    finite = [value for value in values if value is not None and math.isfinite(value)]
    if not finite:
        return None
    return min(finite), max(finite)


__all__ = [
    "accumulate",
    "annuitize",
    "decumulate",
    "expected_monthly_pension",
    "invested_capital_at",
    "project",
    "project_cached",
    "remaining_pension_at",
    "retirement_boundary_wealth",
    "series_bounds",
    "wealth_at",
]
