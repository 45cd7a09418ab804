"""Expense aggregation by merchant category code."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from retirement_backend.schemas.expenses import (
    Category,
    CategorySummary,
    MonthSummary,
    Transaction,
)

logger = logging.getLogger(__name__)

INVESTMENTS = "Investments"

MCC_CATEGORIES: Dict[str, Category] = {
    "5411": Category(name="Groceries", icon="shopping-bag"),
    "5812": Category(name="Restaurants", icon="utensils"),
    "4111": Category(name="Transport", icon="car"),
    "5813": Category(name="Entertainment", icon="music"),
    "6513": Category(name="Rent", icon="home"),
    "5192": Category(name="Books", icon="book"),
    "5977": Category(name="Cosmetics", icon="shopping-bag"),
    "6211": Category(name=INVESTMENTS, icon="trending-up"),
}
DEFAULT_CATEGORY = Category(name="Other", icon="shopping-bag")

_ICONS_BY_NAME = {category.name: category.icon for category in MCC_CATEGORIES.values()}


def category_for_mcc(mcc: Optional[str]) -> Category:
    return MCC_CATEGORIES.get(mcc or "", DEFAULT_CATEGORY)


def previous_month(month: str) -> str:
    """'2025-01' -> '2024-12'."""
    year, number = int(month[:4]), int(month[5:7])
    if number == 1:
        return f"{year - 1}-12"
    return f"{year}-{number - 1:02d}"


def month_label(month: str) -> str:
    return datetime.strptime(month, "%Y-%m").strftime("%B %Y")


def available_months(transactions: Iterable[Transaction]) -> List[str]:
    """Unique YYYY-MM keys, most recent first."""
    return sorted({transaction.month for transaction in transactions}, reverse=True)


def _percent_change(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def _category_totals(transactions: Iterable[Transaction], month: str) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for transaction in transactions:
        if transaction.side != "debt" or transaction.month != month:
            continue
        totals[category_for_mcc(transaction.mcc).name] += abs(transaction.amount)
    return totals


def summarize_month(transactions: List[Transaction], month: Optional[str] = None) -> MonthSummary:
    """
    Aggregate outgoing transactions of `month` by category and compare with
    the preceding month.

    Without a month the most recent month present in the data is used.
    """
    if month is None:
        months = available_months(transactions)
        month = months[0] if months else datetime.utcnow().strftime("%Y-%m")

    current = _category_totals(transactions, month)
    previous = _category_totals(transactions, previous_month(month))

    total = sum(current.values())
    previous_total = sum(previous.values())

    categories = [
        CategorySummary(
            name=name,
            icon=_ICONS_BY_NAME.get(name, DEFAULT_CATEGORY.icon),
            amount=round(amount),
            previousAmount=round(previous.get(name, 0.0)),
            change=round(_percent_change(amount, previous.get(name, 0.0)), 1),
            percentage=amount / total * 100 if total > 0 else 0.0,
        )
        for name, amount in current.items()
    ]
    categories.sort(key=lambda category: category.amount, reverse=True)

    logger.debug("summarized %d categories for %s", len(categories), month)
    return MonthSummary(
        month=month,
        label=month_label(month),
        total=round(total),
        previousTotal=round(previous_total),
        change=round(_percent_change(total, previous_total), 1),
        investedAmount=round(current.get(INVESTMENTS, 0.0)),
        categories=categories,
    )


def spending_insight(summary: MonthSummary) -> str:
    """Rule-based one-liner; also the fallback when text generation fails."""
    candidates = [
        category for category in summary.categories if category.name.lower() != INVESTMENTS.lower()
    ]
    highest = max(candidates, key=lambda category: category.change, default=None)

    if highest is not None and highest.change > 5:
        return (
            f"Your {highest.name.lower()} spending increased by {highest.change:g}%. "
            "Consider setting a limit next month."
        )
    if summary.change < -5:
        return (
            f"Great job! Your overall spending decreased by {abs(summary.change):g}% "
            "compared to last month."
        )
    return "Your spending patterns are consistent with last month. Keep maintaining your budget."
