"""Data contracts for the retirement projection."""

from __future__ import annotations

from datetime import datetime
from math import isfinite
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Longest span of years a single request may chart.
MAX_HORIZON_YEARS = 120


class ProjectionParameters(BaseModel):
    """Inputs of a single projection run.

    Rates are percents (6.1 means 6.1 % p.a.); the engine converts them to
    fractions where it uses them. No constraints here: the engine takes
    whatever it is given and degrades instead of raising.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    current_year: int
    last_year: int
    monthly_deposit: float
    deposit_growth_rate: float
    market_rate: float
    retirement_start_year: int
    retirement_growth_rate: float
    retirement_duration: int
    initial_capital: float = 0.0

    @property
    def years_to_project(self) -> int:
        return max(0, self.last_year - self.current_year + 1)


class ProjectionPoint(BaseModel):
    """One charted year; each value is None outside its defined domain."""

    model_config = ConfigDict(frozen=True)

    year: int
    invested_capital: Optional[float] = None
    wealth: Optional[float] = None
    remaining_pension: Optional[float] = None


class AccumulationSeries(BaseModel):
    """Invested capital and wealth indexed by elapsed years since current_year."""

    invested_capital: List[float] = Field(default_factory=list)
    wealth: List[float] = Field(default_factory=list)


class ProjectionSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    points: Tuple[ProjectionPoint, ...] = ()
    retirement_wealth: Optional[float] = None
    expected_monthly_pension: float = 0.0

    def point_for(self, year: int) -> Optional[ProjectionPoint]:
        if not self.points:
            return None
        index = year - self.points[0].year
        if 0 <= index < len(self.points):
            return self.points[index]
        return None

    def chart_rows(self) -> List[Dict[str, Optional[int]]]:
        """Presentation rows, money rounded to whole currency units."""
        return [
            {
                "year": point.year,
                "investedCapital": whole_units(point.invested_capital),
                "wealth": whole_units(point.wealth),
                "remainingPension": whole_units(point.remaining_pension),
            }
            for point in self.points
        ]


def whole_units(value: Optional[float]) -> Optional[int]:
    if value is None or not isfinite(value):
        return None
    return int(round(value))


class ProjectionRequest(BaseModel):
    """Validated API payload; camelCase to match the frontend."""

    model_config = ConfigDict(extra="forbid")

    currentYear: Optional[int] = None
    lastYear: Optional[int] = None
    monthlyDeposit: float = Field(ge=0)
    depositGrowthRate: float = Field(default=0.0, ge=0, le=100)
    marketRate: float = Field(ge=0, le=100)
    retirementStartYear: int
    retirementGrowthRate: float = Field(default=0.0, ge=0, le=100)
    retirementDuration: int = Field(default=20, ge=1, le=80)
    initialCapital: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def ensure_validity(self) -> "ProjectionRequest":
        current_year = self.currentYear if self.currentYear is not None else datetime.utcnow().year
        if self.lastYear is not None and self.lastYear < current_year:
            raise ValueError("lastYear must not be before currentYear")
        if self.lastYear is not None and self.lastYear - current_year > MAX_HORIZON_YEARS:
            raise ValueError(f"lastYear must be at most {MAX_HORIZON_YEARS} years after currentYear")
        if self.retirementStartYear < current_year:
            raise ValueError("retirementStartYear must not be before currentYear")
        return self

    def to_parameters(self, horizon_years: int = 55) -> ProjectionParameters:
        current_year = self.currentYear if self.currentYear is not None else datetime.utcnow().year
        last_year = self.lastYear if self.lastYear is not None else current_year + horizon_years
        return ProjectionParameters(
            current_year=current_year,
            last_year=last_year,
            monthly_deposit=self.monthlyDeposit,
            deposit_growth_rate=self.depositGrowthRate,
            market_rate=self.marketRate,
            retirement_start_year=self.retirementStartYear,
            retirement_growth_rate=self.retirementGrowthRate,
            retirement_duration=self.retirementDuration,
            initial_capital=self.initialCapital,
        )

    @classmethod
    def from_parameters(cls, params: ProjectionParameters) -> "ProjectionRequest":
        return cls(
            currentYear=params.current_year,
            lastYear=params.last_year,
            monthlyDeposit=params.monthly_deposit,
            depositGrowthRate=params.deposit_growth_rate,
            marketRate=params.market_rate,
            retirementStartYear=params.retirement_start_year,
            retirementGrowthRate=params.retirement_growth_rate,
            retirementDuration=params.retirement_duration,
            initialCapital=params.initial_capital,
        )


class Bounds(BaseModel):
    min: float
    max: float


class ProjectionResponse(BaseModel):
    rows: List[Dict[str, Optional[int]]]
    expectedMonthlyPension: Optional[int] = None
    retirementWealth: Optional[int] = None
    bounds: Optional[Bounds] = None
