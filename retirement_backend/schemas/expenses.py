"""Data contracts for the expense overview."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Transaction(BaseModel):
    """One booked card/bank transaction as delivered by the banking data source."""

    model_config = ConfigDict(extra="ignore")

    id: str
    bookingDate: str
    side: str = "debt"
    amount: float = 0.0
    currency: str = "EUR"
    type: str = "CARD"
    mcc: str = ""
    description: Optional[str] = None

    @field_validator("bookingDate")
    @classmethod
    def ensure_iso_date(cls, value: str) -> str:
        try:
            date.fromisoformat(value[:10])
        except ValueError:
            raise ValueError("bookingDate must be an ISO date (YYYY-MM-DD)") from None
        return value

    @property
    def month(self) -> str:
        return self.bookingDate[:7]


class Category(BaseModel):
    name: str
    icon: str


class CategorySummary(BaseModel):
    name: str
    icon: str
    amount: int
    previousAmount: int
    change: float
    percentage: float


class MonthSummary(BaseModel):
    month: str
    label: str
    total: int
    previousTotal: int
    change: float
    investedAmount: int
    categories: List[CategorySummary] = Field(default_factory=list)


class ExpenseRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    month: Optional[str] = None
    transactions: List[Transaction] = Field(default_factory=list)

    @field_validator("month")
    @classmethod
    def ensure_month(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            if len(value) != 7:
                raise ValueError
            datetime.strptime(value, "%Y-%m")
        except ValueError:
            raise ValueError("month must be YYYY-MM") from None
        return value
