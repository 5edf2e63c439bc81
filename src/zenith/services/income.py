"""Income summaries."""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Iterable

from ..models.income import Income
from .balance import normalize_currency

INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Investments",
    "Sale",
    "Gift",
    "Refund",
    "Other",
)


def validate_income(*, description: str, amount: float | None, category: str) -> list[str]:
    """Return the reasons an income form must be refused."""

    problems: list[str] = []
    if not (description or "").strip():
        problems.append("A description is required")
    if amount is None or not math.isfinite(amount) or amount <= 0:
        problems.append("The amount must be greater than zero")
    if category not in INCOME_CATEGORIES:
        problems.append(f"Unknown category: {category}")
    return problems


def total_income(incomes: Iterable[Income]) -> float:
    return normalize_currency(sum(float(i.amount) for i in incomes))


def average_income(incomes: Iterable[Income]) -> float:
    incomes = list(incomes)
    if not incomes:
        return 0.0
    return normalize_currency(total_income(incomes) / len(incomes))


def income_by_category(incomes: Iterable[Income]) -> list[tuple[str, float]]:
    """Totals per category, largest first."""

    totals: dict[str, float] = defaultdict(float)
    for income in incomes:
        totals[income.category] += float(income.amount)
    return sorted(
        ((category, normalize_currency(total)) for category, total in totals.items()),
        key=lambda item: item[1],
        reverse=True,
    )
