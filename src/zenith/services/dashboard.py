"""Dashboard aggregation over a user's debts and payments."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from ..models.debt import Debt, DebtState
from ..models.payment import Payment
from ..models.summaries import DashboardSummary
from .balance import coerce_state, debt_total, normalize_currency, remaining_balance, total_paid


def _payments_by_debt(payments: Iterable[Payment]) -> dict[int, list[Payment]]:
    grouped: dict[int, list[Payment]] = defaultdict(list)
    for payment in payments:
        grouped[payment.debt_id].append(payment)
    return grouped


def summarize(debts: Iterable[Debt], payments: Iterable[Payment]) -> DashboardSummary:
    """Compute the dashboard figures the backend's ``/dashboard`` endpoint returns.

    Sums mix currencies the same way the backend does; use
    ``outstanding_by_currency`` when the split matters.
    """

    debts = list(debts)
    grouped = _payments_by_debt(payments)
    summary = DashboardSummary(debt_count=len(debts))
    by_currency: dict[str, float] = defaultdict(float)

    for debt in debts:
        debt_payments = grouped.get(debt.id, []) if debt.id is not None else []
        remaining = remaining_balance(debt, debt_payments)
        summary.total_debt += debt_total(debt)
        summary.total_paid += total_paid(debt, debt_payments)
        summary.outstanding += remaining
        by_currency[debt.currency] += remaining
        if coerce_state(debt.state) is DebtState.PAID:
            summary.paid_count += 1
        else:
            summary.open_count += 1

    summary.total_debt = normalize_currency(summary.total_debt)
    summary.total_paid = normalize_currency(summary.total_paid)
    summary.outstanding = normalize_currency(summary.outstanding)
    summary.outstanding_by_currency = {
        currency: normalize_currency(amount) for currency, amount in by_currency.items()
    }
    return summary


def upcoming_due(
    debts: Iterable[Debt],
    *,
    today: Optional[date] = None,
    days: int = 30,
    limit: int = 5,
) -> list[Debt]:
    """Unpaid debts due after ``today`` and before ``today + days``, soonest first."""

    today = today or date.today()
    horizon = today + timedelta(days=days)
    upcoming = [
        d
        for d in debts
        if coerce_state(d.state) is not DebtState.PAID and today < d.due_date < horizon
    ]
    upcoming.sort(key=lambda d: d.due_date)
    return upcoming[: max(limit, 0)]


def reminders_due(
    debts: Iterable[Debt], *, today: Optional[date] = None, days: int = 30
) -> list[Debt]:
    """Upcoming debts whose reminder flag is on."""

    debts = list(debts)
    upcoming = upcoming_due(debts, today=today, days=days, limit=len(debts))
    return [d for d in upcoming if d.reminder]
