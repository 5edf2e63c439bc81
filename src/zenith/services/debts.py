"""Debt validation and list filtering."""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, Mapping, Optional

from ..models.debt import Debt, DebtState
from ..models.payment import Payment
from .balance import coerce_state, display_state, remaining_balance
from .exchange import validate_currency

STATUS_ALL = "all"


def validate_debt(
    *,
    description: str,
    principal: float | None,
    due_date: Optional[date],
    interest_applied: bool = False,
    interest_rate: float = 0.0,
    currency: Optional[str] = None,
) -> list[str]:
    """Return the reasons a debt form must be refused (empty when valid)."""

    problems: list[str] = []
    if not (description or "").strip():
        problems.append("A description is required")
    if principal is None or not math.isfinite(principal) or principal <= 0:
        problems.append("The amount must be greater than zero")
    if due_date is None:
        problems.append("A target payment date is required")
    if interest_applied and (
        interest_rate is None or not math.isfinite(interest_rate) or interest_rate < 0
    ):
        problems.append("The interest rate cannot be negative")
    if currency is not None:
        problems.extend(validate_currency(currency))
    return problems


def validate_debt_record(debt: Debt) -> list[str]:
    """Run :func:`validate_debt` over an entity."""

    return validate_debt(
        description=debt.description,
        principal=debt.principal,
        due_date=debt.due_date,
        interest_applied=debt.interest_applied,
        interest_rate=debt.interest_rate,
        currency=debt.currency,
    )


def normalize_status(raw_value: Optional[str]) -> Optional[DebtState]:
    """Return a state filter, treating falsy/'all' as no filter."""

    if not raw_value or raw_value.strip().lower() == STATUS_ALL:
        return None
    return DebtState(raw_value.strip().lower())


def filter_debts(
    debts: Iterable[Debt],
    *,
    search: Optional[str] = None,
    status: Optional[str | DebtState] = None,
    payments_by_debt: Optional[Mapping[int, Iterable[Payment]]] = None,
    today: Optional[date] = None,
) -> list[Debt]:
    """Filter by description/creditor substring and by state.

    States match the stored value, except ``overdue``, which is never stored
    and is derived from the due date and the balance left after
    ``payments_by_debt``.
    """

    result = list(debts)
    if search:
        needle = search.strip().lower()
        result = [
            d
            for d in result
            if needle in (d.description or "").lower() or needle in (d.creditor or "").lower()
        ]
    if status is not None and status != STATUS_ALL:
        wanted = status if isinstance(status, DebtState) else normalize_status(status)
        if wanted is DebtState.OVERDUE:
            payments_by_debt = payments_by_debt or {}
            result = [
                d
                for d in result
                if display_state(
                    d, remaining_balance(d, payments_by_debt.get(d.id, ())), today
                )
                is DebtState.OVERDUE
            ]
        elif wanted is not None:
            result = [d for d in result if coerce_state(d.state) is wanted]
    return result


def active_debts(debts: Iterable[Debt]) -> list[Debt]:
    """Debts that can still receive payments."""

    return [d for d in debts if coerce_state(d.state) is not DebtState.PAID]
