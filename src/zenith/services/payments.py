"""Payment list helpers: filtering, per-currency totals and recency."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models.debt import Debt
from ..models.payment import Payment
from .balance import normalize_currency


def filter_payments(
    payments: Iterable[Payment],
    *,
    debt_id: Optional[int] = None,
    search: Optional[str] = None,
    debts: Iterable[Debt] = (),
) -> list[Payment]:
    """Filter payments by debt and by a substring of the note or debt description."""

    result = list(payments)
    if debt_id is not None:
        result = [p for p in result if p.debt_id == debt_id]
    if search:
        needle = search.strip().lower()
        descriptions = {d.id: (d.description or "").lower() for d in debts}
        result = [
            p
            for p in result
            if needle in descriptions.get(p.debt_id, "") or needle in (p.note or "").lower()
        ]
    return result


def totals_by_currency(payments: Iterable[Payment]) -> dict[str, float]:
    """Sum payment amounts per payment currency, as entered."""

    totals: dict[str, float] = defaultdict(float)
    for payment in payments:
        totals[payment.currency] += float(payment.amount)
    return {currency: normalize_currency(total) for currency, total in totals.items()}


def averages_by_currency(payments: Iterable[Payment]) -> dict[str, float]:
    """Average payment amount per payment currency."""

    sums: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)
    for payment in payments:
        sums[payment.currency] += float(payment.amount)
        counts[payment.currency] += 1
    return {
        currency: normalize_currency(sums[currency] / counts[currency]) for currency in sums
    }


def _naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes while fresh rows are aware
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def recent_payments(payments: Iterable[Payment], limit: int = 5) -> list[Payment]:
    """Newest payments first."""

    ordered = sorted(payments, key=lambda p: (_naive_utc(p.paid_at), p.id or 0), reverse=True)
    return ordered[: max(limit, 0)]
