"""Result objects returned by finance repositories."""

from __future__ import annotations

from dataclasses import dataclass, field

from .debt import DebtState
from .payment import Payment


@dataclass(slots=True)
class PaymentReceipt:
    """Outcome of recording or editing a payment."""

    payment: Payment
    new_balance: float
    debt_state: DebtState


@dataclass(slots=True)
class PaymentHistory:
    """Payments of one debt plus their running total in the debt's currency."""

    payments: list[Payment]
    total_paid: float


@dataclass(slots=True)
class DashboardSummary:
    """Aggregate counts and sums across a user's debts."""

    total_debt: float = 0.0
    total_paid: float = 0.0
    outstanding: float = 0.0
    debt_count: int = 0
    open_count: int = 0
    paid_count: int = 0
    outstanding_by_currency: dict[str, float] = field(default_factory=dict)
