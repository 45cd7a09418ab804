"""Natural-language spending commentary via an OpenAI-compatible chat API."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import requests

from retirement_backend.config import Settings, load_settings
from retirement_backend.core.expenses import previous_month, spending_insight
from retirement_backend.schemas.expenses import MonthSummary, Transaction

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful financial assistant that provides concise, "
    "personalized financial insights."
)

INSTRUCTIONS = """Analyze the customer's spending data and find one under-used, duplicative or \
low-value subscription or expense that could be cut with minimal lifestyle impact.

Output a single, concise, upbeat in-app message that:
1. Highlights a positive recent spending habit.
2. Names at most one specific expense to reduce and hints at its long-term benefit.
3. Points out overlapping services in the same category when there are any."""


def build_prompt(summary: MonthSummary, transactions: Sequence[Transaction] = ()) -> str:
    lines = [
        INSTRUCTIONS,
        "",
        "Monthly Data:",
        f"- Month: {summary.label}",
        f"- Total Amount: €{summary.total}",
    ]

    if summary.categories:
        lines.append("Top Spending Categories:")
        for category in summary.categories[:3]:
            lines.append(f"- {category.name}: €{category.amount}")

    if summary.previousTotal > 0:
        lines.append(
            f"Month-over-month total expense change: {summary.change:.1f}% "
            f"(previous month: €{summary.previousTotal})"
        )

    recent = [
        transaction
        for transaction in transactions
        if transaction.side == "debt"
        and transaction.month in (summary.month, previous_month(summary.month))
    ]
    recent.sort(key=lambda transaction: transaction.bookingDate, reverse=True)
    if recent:
        lines.append("")
        lines.append("Recent Transactions (up to 5):")
        for index, transaction in enumerate(recent[:5], start=1):
            description = transaction.description or "No description"
            lines.append(
                f"{index}. {transaction.bookingDate}: €{abs(transaction.amount):.2f} - {description}"
            )

    lines.append("")
    lines.append(
        "1 to 2 sentences maximum. Use a friendly, professional tone. "
        "No introduction or greeting. No placeholders."
    )
    return "\n".join(lines)


def _request_completion(prompt: str, settings: Settings) -> str:
    response = requests.post(
        settings.summary_url,
        headers={
            "Authorization": f"Bearer {settings.openai_api_key}",
            "Content-Type": "application/json",
        },
        json={
            "model": settings.summary_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7,
            "max_tokens": 150,
        },
        timeout=settings.summary_timeout,
    )
    response.raise_for_status()
    text = response.json()["choices"][0]["message"]["content"]
    if not isinstance(text, str) or not text.strip():
        raise ValueError("empty completion")
    return text.strip()


def summarize(
    summary: MonthSummary,
    transactions: Sequence[Transaction] = (),
    settings: Optional[Settings] = None,
) -> str:
    """
    Commentary for one month of spending.

    Falls back to the rule-based insight when no API key is configured or the
    service fails in any way; never raises.
    """
    settings = settings or load_settings()
    if not settings.openai_api_key:
        logger.info("no text-generation key configured, using static insight")
        return spending_insight(summary)

    try:
        return _request_completion(build_prompt(summary, transactions), settings)
    except (requests.RequestException, KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("text generation failed, falling back to static insight: %s", exc)
        return spending_insight(summary)
